from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Iterable
import uuid

import numpy as np

from lutmerge.chain import (
    ChainEntry,
    LutCache,
    LutChain,
    SamplingResource,
    bake_chain,
    clamp_intensity,
    composite_image,
    render_thumbnail,
)
from lutmerge.config import AppConfig, default_config
from lutmerge.imaging import cover_fit, load_image, save_image
from lutmerge.lut import LutDocument, LutError, load_cube, parse_cube, write_cube


logger = logging.getLogger(__name__)


class EmptyChainError(LutError):
    pass


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class LibraryEntry:
    lut_id: str
    name: str
    document: LutDocument


@dataclass
class Photo:
    path: Path
    name: str
    photo_id: str = field(default_factory=_new_id)


@dataclass(frozen=True)
class RenderUniforms:
    """What a rendering backend needs to draw the chain for one frame."""

    count: int
    resources: tuple[SamplingResource, ...]
    intensities: tuple[float, ...]
    show_original: bool

    def stages(self) -> list[tuple[SamplingResource, float]]:
        return list(zip(self.resources, self.intensities))


@dataclass
class ImportReport:
    imported: list[LibraryEntry] = field(default_factory=list)
    failed: list[tuple[Path, str]] = field(default_factory=list)


class EditSession:
    """Library, active chain, photos and compare state for one editing session."""

    def __init__(self, config: AppConfig | None = None, cache: LutCache | None = None) -> None:
        self.config = config or default_config()
        self.cache = cache or LutCache()
        self.chain = LutChain()
        self.show_original = False
        self._library: dict[str, LibraryEntry] = {}
        self._photos: list[Photo] = []
        self._current_index = -1
        self._current_image: np.ndarray | None = None

    @property
    def library(self) -> list[LibraryEntry]:
        return list(self._library.values())

    def get_lut(self, lut_id: str) -> LibraryEntry:
        try:
            return self._library[lut_id]
        except KeyError:
            raise KeyError(f"unknown LUT id: {lut_id}") from None

    def _register(self, name: str, document: LutDocument) -> LibraryEntry:
        entry = LibraryEntry(lut_id=_new_id(), name=name, document=document)
        self._library[entry.lut_id] = entry
        logger.info("imported LUT %s as %s (size=%d)", name, entry.lut_id, document.size)
        return entry

    def import_lut(self, path: Path) -> LibraryEntry:
        path = Path(path)
        return self._register(path.name, load_cube(path))

    def import_lut_text(self, text: str, name: str) -> LibraryEntry:
        return self._register(name, parse_cube(text))

    def import_luts(self, paths: Iterable[Path]) -> ImportReport:
        report = ImportReport()
        for path in paths:
            path = Path(path)
            try:
                report.imported.append(self.import_lut(path))
            except (LutError, OSError, UnicodeDecodeError) as exc:
                logger.error("failed to parse LUT %s: %s", path.name, exc)
                report.failed.append((path, str(exc)))
        return report

    def remove_lut(self, lut_id: str) -> None:
        self.get_lut(lut_id)
        self.cache.dispose(lut_id)
        removed = self.chain.remove_lut(lut_id)
        del self._library[lut_id]
        logger.info("removed LUT %s (%d chain entries dropped)", lut_id, removed)

    def add_to_chain(self, lut_id: str, intensity: float = 1.0) -> ChainEntry:
        lut = self.get_lut(lut_id)
        return self.chain.add(lut.lut_id, lut.document, intensity=intensity)

    def remove_from_chain(self, entry_id: str) -> None:
        self.chain.remove(entry_id)

    def set_intensity(self, entry_id: str, intensity: float) -> ChainEntry:
        return self.chain.set_intensity(entry_id, intensity)

    def move_in_chain(self, entry_id: str, index: int) -> None:
        self.chain.move(entry_id, index)

    def clear_chain(self) -> None:
        self.chain.clear()

    def set_compare(self, show_original: bool) -> None:
        self.show_original = bool(show_original)

    def toggle_compare(self) -> bool:
        self.show_original = not self.show_original
        return self.show_original

    def render_uniforms(self) -> RenderUniforms:
        entries = self.chain.entries[: self.chain.capacity]
        resources = tuple(self.cache.get_or_create(e.lut_id, e.document) for e in entries)
        return RenderUniforms(
            count=len(entries),
            resources=resources,
            intensities=tuple(e.intensity for e in entries),
            show_original=self.show_original,
        )

    @property
    def photos(self) -> list[Photo]:
        return list(self._photos)

    @property
    def current_photo(self) -> Photo | None:
        if self._current_index < 0:
            return None
        return self._photos[self._current_index]

    @property
    def current_image(self) -> np.ndarray:
        photo = self.current_photo
        if photo is None:
            raise LookupError("no photo selected")
        if self._current_image is None:
            self._current_image = load_image(photo.path)
        return self._current_image

    def add_photos(self, paths: Iterable[Path]) -> list[Photo]:
        added = [Photo(path=Path(p), name=Path(p).name) for p in paths]
        self._photos.extend(added)
        if self._photos:
            self.select_photo(len(self._photos) - 1)
        return added

    def select_photo(self, index: int) -> Photo:
        if not 0 <= index < len(self._photos):
            raise IndexError(f"photo index out of range: {index}")
        self._current_index = index
        self._current_image = None
        return self._photos[index]

    def remove_photo(self, photo_id: str) -> None:
        index = next((i for i, p in enumerate(self._photos) if p.photo_id == photo_id), -1)
        if index == -1:
            return

        del self._photos[index]
        if self._current_index == index:
            self._current_index = -1
            self._current_image = None
            if self._photos:
                self.select_photo(0)
        elif self._current_index > index:
            self._current_index -= 1

    def preview(self, image: np.ndarray | None = None) -> np.ndarray:
        source = self.current_image if image is None else image
        uniforms = self.render_uniforms()
        return composite_image(source, uniforms.stages(), show_original=uniforms.show_original)

    def export_image(self, path: Path | None = None) -> Path:
        photo = self.current_photo
        if photo is None:
            raise LookupError("no photo selected")
        if path is None:
            path = photo.path.with_name(f"{self.config.export.output_prefix}{photo.name}")

        edited = composite_image(self.current_image, self.chain.stages())
        return save_image(Path(path), edited, jpeg_quality=self.config.export.jpeg_quality)

    def merged_lut(self, size: int | None = None) -> LutDocument:
        if len(self.chain) == 0:
            raise EmptyChainError("chain is empty, nothing to merge")
        bake_size = self.config.export.bake_size if size is None else int(size)
        return bake_chain(self.chain.stages(), size=bake_size, title=self.config.export.merged_title)

    def export_merged_lut(self, path: Path, size: int | None = None) -> Path:
        return write_cube(Path(path), self.merged_lut(size))

    def thumbnail(self, lut_id: str, intensity: float = 1.0) -> np.ndarray:
        lut = self.get_lut(lut_id)
        cfg = self.config.thumbnail
        small = cover_fit(self.current_image, cfg.width, cfg.height)
        return render_thumbnail(small, lut.document, intensity=clamp_intensity(intensity))
