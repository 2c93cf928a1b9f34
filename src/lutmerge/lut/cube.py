from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Sequence

import numpy as np

from .base import DataSizeMismatchError, InvalidLutError, LutFormatError, MissingSizeError
from .types import LutDocument, Vec3


logger = logging.getLogger(__name__)

DEFAULT_MERGED_TITLE = "Merged LUT"
CUBE_HEADER = "# Created by LUT Merge"


def _parse_float(token: str, line_number: int) -> float:
    try:
        value = float(token)
    except ValueError as exc:
        raise LutFormatError(f"expected a number, got {token!r}", line_number) from exc
    if not math.isfinite(value):
        raise LutFormatError(f"non-finite value {token!r}", line_number)
    return value


def _parse_vec3(parts: list[str], line_number: int) -> Vec3:
    if len(parts) < 4:
        raise LutFormatError(f"{parts[0].upper()} needs three values", line_number)
    return (
        _parse_float(parts[1], line_number),
        _parse_float(parts[2], line_number),
        _parse_float(parts[3], line_number),
    )


def _parse_size(parts: list[str], line_number: int) -> int:
    if len(parts) < 2:
        raise LutFormatError("LUT_3D_SIZE needs a value", line_number)
    try:
        value = float(parts[1])
    except ValueError as exc:
        raise LutFormatError(f"invalid LUT_3D_SIZE {parts[1]!r}", line_number) from exc
    # integral float tokens such as "33.0" are accepted
    if not value.is_integer():
        raise LutFormatError(f"invalid LUT_3D_SIZE {parts[1]!r}", line_number)
    size = int(value)
    if size < 2:
        raise LutFormatError(f"LUT_3D_SIZE must be at least 2, got {size}", line_number)
    return size


def _is_number(token: str) -> bool:
    try:
        float(token)
    except ValueError:
        return False
    return True


def parse_cube(text: str) -> LutDocument:
    title = ""
    size: int | None = None
    domain_min: Vec3 = (0.0, 0.0, 0.0)
    domain_max: Vec3 = (1.0, 1.0, 1.0)
    values: list[float] = []
    rows = 0

    for line_number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        parts = line.split()
        head = parts[0].upper()
        if head == "TITLE":
            title = line[len(parts[0]):].strip().replace('"', "")
        elif head == "LUT_3D_SIZE":
            size = _parse_size(parts, line_number)
        elif head == "DOMAIN_MIN":
            domain_min = _parse_vec3(parts, line_number)
        elif head == "DOMAIN_MAX":
            domain_max = _parse_vec3(parts, line_number)
        elif _is_number(parts[0]):
            # trailing comments are allowed after a data row
            tokens = line.split("#", 1)[0].split()
            values.extend(_parse_float(token, line_number) for token in tokens)
            rows += 1
        else:
            logger.debug("ignoring unsupported CUBE line %d: %s", line_number, head)

    if size is None:
        raise MissingSizeError()

    n = size * size * size
    if len(values) == n * 3:
        rgb = np.asarray(values, dtype=np.float32).reshape(n, 3)
        rgba = np.concatenate([rgb, np.ones((n, 1), dtype=np.float32)], axis=1)
    elif len(values) == n * 4:
        rgba = np.asarray(values, dtype=np.float32).reshape(n, 4)
    else:
        raise DataSizeMismatchError(size=size, actual=len(values), rows=rows)

    return LutDocument(
        size=size,
        samples=rgba.reshape(-1),
        domain_min=domain_min,
        domain_max=domain_max,
        title=title,
    )


def load_cube(path: Path) -> LutDocument:
    path = Path(path)
    text = path.read_text(encoding="utf-8-sig")
    lut = parse_cube(text)
    if not lut.title:
        lut = LutDocument(
            size=lut.size,
            samples=lut.samples,
            domain_min=lut.domain_min,
            domain_max=lut.domain_max,
            title=path.stem,
        )
    logger.info("loaded LUT %s size=%d from %s", lut.title, lut.size, path)
    return lut


def _format_vec3(values: Sequence[float]) -> str:
    return " ".join(repr(float(v)) for v in values)


def format_cube(
    size: int,
    samples: np.ndarray | Sequence[float],
    title: str = DEFAULT_MERGED_TITLE,
    domain_min: Vec3 = (0.0, 0.0, 0.0),
    domain_max: Vec3 = (1.0, 1.0, 1.0),
) -> str:
    data = np.asarray(samples, dtype=np.float64).reshape(-1)
    expected = size * size * size * 4
    if data.shape[0] != expected:
        raise InvalidLutError(f"expected {expected} RGBA values for size {size}, got {data.shape[0]}")

    lines = [
        CUBE_HEADER,
        f'TITLE "{title}"',
        f"LUT_3D_SIZE {size}",
        f"DOMAIN_MIN {_format_vec3(domain_min)}",
        f"DOMAIN_MAX {_format_vec3(domain_max)}",
        "",
    ]
    rgb = data.reshape(-1, 4)[:, :3]
    lines.extend(f"{r:.6f} {g:.6f} {b:.6f}" for r, g, b in rgb.tolist())
    return "\n".join(lines) + "\n"


def dump_cube(lut: LutDocument) -> str:
    return format_cube(
        lut.size,
        lut.samples,
        title=lut.title or DEFAULT_MERGED_TITLE,
        domain_min=lut.domain_min,
        domain_max=lut.domain_max,
    )


def write_cube(path: Path, lut: LutDocument) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_cube(lut), encoding="utf-8")
    logger.info("wrote LUT %s size=%d to %s", lut.title, lut.size, path)
    return path
