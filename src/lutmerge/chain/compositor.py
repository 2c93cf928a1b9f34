from __future__ import annotations

import logging
from typing import Sequence, Union

import numpy as np

from lutmerge.lut.cube import DEFAULT_MERGED_TITLE
from lutmerge.lut.sampler import sample_array
from lutmerge.lut.types import LutDocument, grid_coordinates, grid_samples

from .cache import SamplingResource
from .model import MAX_CHAIN_LENGTH


logger = logging.getLogger(__name__)

BAKE_SIZE = 32

StageSource = Union[LutDocument, SamplingResource]
Stage = tuple[StageSource, float]


def mix(a: np.ndarray, b: np.ndarray, t: float) -> np.ndarray:
    # exact at t == 0 and t == 1
    return a * (1.0 - t) + b * t


def _lookup(source: StageSource, rgb: np.ndarray) -> np.ndarray:
    if isinstance(source, LutDocument):
        return sample_array(source, rgb)
    return source.sample(rgb)


def composite(rgb: np.ndarray, stages: Sequence[Stage], show_original: bool = False) -> np.ndarray:
    original = np.asarray(rgb, dtype=np.float64)
    if len(stages) > MAX_CHAIN_LENGTH:
        logger.warning("chain has %d stages, evaluating the first %d", len(stages), MAX_CHAIN_LENGTH)

    color = original
    for source, intensity in list(stages)[:MAX_CHAIN_LENGTH]:
        color = mix(color, _lookup(source, color), float(intensity))

    if show_original:
        color = mix(color, original, 1.0)
    return color


def composite_color(
    stages: Sequence[Stage],
    r: float,
    g: float,
    b: float,
    show_original: bool = False,
) -> tuple[float, float, float]:
    out = composite(np.array([r, g, b], dtype=np.float64), stages, show_original=show_original)
    return (float(out[0]), float(out[1]), float(out[2]))


def composite_image(image: np.ndarray, stages: Sequence[Stage], show_original: bool = False) -> np.ndarray:
    """Run the chain over an ``(H, W, 3)`` or ``(H, W, 4)`` float image; alpha passes through."""
    x = np.asarray(image)
    if x.ndim != 3 or x.shape[-1] not in (3, 4):
        raise ValueError(f"expected an (H, W, 3|4) image, got shape {x.shape}")

    rgb = composite(x[..., :3], stages, show_original=show_original).astype(np.float32)
    if x.shape[-1] == 4:
        return np.concatenate([rgb, x[..., 3:4].astype(np.float32)], axis=-1)
    return rgb


def bake_chain(stages: Sequence[Stage], size: int = BAKE_SIZE, title: str = DEFAULT_MERGED_TITLE) -> LutDocument:
    """Evaluate the chain at every lattice point of a new ``size``-cubed LUT."""
    if size < 2:
        raise ValueError(f"bake size must be at least 2, got {size}")
    rgb = composite(grid_coordinates(size), stages)
    logger.info("baked %d-stage chain into %d^3 LUT", min(len(stages), MAX_CHAIN_LENGTH), size)
    return LutDocument(size=size, samples=grid_samples(size, rgb), title=title)


def render_thumbnail(image: np.ndarray, lut: StageSource, intensity: float = 1.0) -> np.ndarray:
    return composite_image(image, [(lut, intensity)], show_original=False)
