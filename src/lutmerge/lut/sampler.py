from __future__ import annotations

import numpy as np

from .types import LutDocument, Vec3


# Keeps the upper lattice corner strictly inside the grid.
EPSILON = 1e-4
_MIN_DOMAIN_SPAN = 1e-6


def trilinear(grid: np.ndarray, size: int, domain_min: Vec3, domain_max: Vec3, rgb: np.ndarray) -> np.ndarray:
    """Sample a ``[b, g, r]`` indexed RGB grid at ``rgb`` (shape ``(..., 3)``).

    Interpolates along red, then green, then blue. Queries outside the domain
    saturate to the nearest cell.
    """
    x = np.asarray(rgb, dtype=np.float64)
    if x.shape[-1] != 3:
        raise ValueError(f"expected RGB values in the last axis, got shape {x.shape}")

    dom_min = np.asarray(domain_min, dtype=np.float64)
    span = np.maximum(np.asarray(domain_max, dtype=np.float64) - dom_min, _MIN_DOMAIN_SPAN)

    t = np.nan_to_num((x - dom_min) / span, nan=0.0)
    f = np.clip(t * (size - 1), 0.0, size - 1 - EPSILON)

    i0 = np.floor(f).astype(np.intp)
    i1 = i0 + 1
    d = f - i0

    r0, g0, b0 = i0[..., 0], i0[..., 1], i0[..., 2]
    r1, g1, b1 = i1[..., 0], i1[..., 1], i1[..., 2]
    dr, dg, db = d[..., 0:1], d[..., 1:2], d[..., 2:3]

    c000 = grid[b0, g0, r0]
    c100 = grid[b0, g0, r1]
    c010 = grid[b0, g1, r0]
    c110 = grid[b0, g1, r1]
    c001 = grid[b1, g0, r0]
    c101 = grid[b1, g0, r1]
    c011 = grid[b1, g1, r0]
    c111 = grid[b1, g1, r1]

    c00 = c000 * (1 - dr) + c100 * dr
    c10 = c010 * (1 - dr) + c110 * dr
    c01 = c001 * (1 - dr) + c101 * dr
    c11 = c011 * (1 - dr) + c111 * dr

    c0 = c00 * (1 - dg) + c10 * dg
    c1 = c01 * (1 - dg) + c11 * dg

    return c0 * (1 - db) + c1 * db


def sample_array(lut: LutDocument, rgb: np.ndarray) -> np.ndarray:
    return trilinear(lut.rgb_grid(), lut.size, lut.domain_min, lut.domain_max, rgb)


def sample(lut: LutDocument, r: float, g: float, b: float) -> tuple[float, float, float]:
    out = sample_array(lut, np.array([r, g, b], dtype=np.float64))
    return (float(out[0]), float(out[1]), float(out[2]))
