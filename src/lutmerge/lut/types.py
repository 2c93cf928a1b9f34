from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property

import numpy as np

from .base import InvalidLutError

Vec3 = tuple[float, float, float]


def _as_vec3(value: Vec3 | np.ndarray | list[float], name: str) -> Vec3:
    arr = np.asarray(value, dtype=np.float64).reshape(-1)
    if arr.shape[0] != 3 or not np.isfinite(arr).all():
        raise InvalidLutError(f"{name} must be three finite numbers, got {value!r}")
    return (float(arr[0]), float(arr[1]), float(arr[2]))


@dataclass(frozen=True, eq=False)
class LutDocument:
    """One parsed 3D LUT.

    ``samples`` is the flat RGBA grid, red varying fastest, then green, then
    blue: ``index = r + g * size + b * size**2``. The array is read-only.
    """

    size: int
    samples: np.ndarray
    domain_min: Vec3 = (0.0, 0.0, 0.0)
    domain_max: Vec3 = (1.0, 1.0, 1.0)
    title: str = ""

    def __post_init__(self) -> None:
        size = int(self.size)
        if size < 2:
            raise InvalidLutError(f"LUT size must be at least 2, got {self.size}")

        samples = np.array(self.samples, dtype=np.float32).reshape(-1)
        expected = size * size * size * 4
        if samples.shape[0] != expected:
            raise InvalidLutError(f"expected {expected} sample values for size {size}, got {samples.shape[0]}")
        if not np.isfinite(samples).all():
            raise InvalidLutError("LUT samples must be finite")
        samples.flags.writeable = False

        object.__setattr__(self, "size", size)
        object.__setattr__(self, "samples", samples)
        object.__setattr__(self, "domain_min", _as_vec3(self.domain_min, "domain_min"))
        object.__setattr__(self, "domain_max", _as_vec3(self.domain_max, "domain_max"))
        object.__setattr__(self, "title", str(self.title))

    @property
    def sample_count(self) -> int:
        return self.size * self.size * self.size

    @cached_property
    def _rgb_grid(self) -> np.ndarray:
        grid = self.samples.reshape((self.size, self.size, self.size, 4))[..., :3].astype(np.float64)
        grid.flags.writeable = False
        return grid

    def rgb_grid(self) -> np.ndarray:
        """Float64 RGB grid indexed ``[b, g, r]``; alpha is dropped. Built once, read-only."""
        return self._rgb_grid

    @classmethod
    def identity(cls, size: int, title: str = "Identity") -> LutDocument:
        return cls(size=size, samples=grid_samples(size), title=title)


def grid_coordinates(size: int) -> np.ndarray:
    """Normalized lattice coordinates in storage order, shape ``(size**3, 3)``."""
    axis = np.arange(size, dtype=np.float64) / float(size - 1)
    b, g, r = np.meshgrid(axis, axis, axis, indexing="ij")
    return np.stack([r, g, b], axis=-1).reshape(-1, 3)


def grid_samples(size: int, rgb: np.ndarray | None = None) -> np.ndarray:
    """Pack ``(size**3, 3)`` RGB rows into flat RGBA samples with alpha 1.0."""
    if rgb is None:
        rgb = grid_coordinates(size)
    rows = np.asarray(rgb, dtype=np.float32).reshape(-1, 3)
    alpha = np.ones((rows.shape[0], 1), dtype=np.float32)
    return np.concatenate([rows, alpha], axis=1).reshape(-1)
