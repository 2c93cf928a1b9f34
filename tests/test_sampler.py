from __future__ import annotations

import numpy as np

from lutmerge.lut import LutDocument, sample, sample_array
from lutmerge.lut.sampler import EPSILON
from lutmerge.lut.types import grid_coordinates, grid_samples


def _corner_lut() -> LutDocument:
    rgb = np.array([[i & 1, (i >> 1) & 1, (i >> 2) & 1] for i in range(8)], dtype=np.float32)
    return LutDocument(size=2, samples=grid_samples(2, rgb))


def _lut_from(size: int, fn) -> LutDocument:
    return LutDocument(size=size, samples=grid_samples(size, fn(grid_coordinates(size))))


def test_centroid_of_corner_lut() -> None:
    assert sample(_corner_lut(), 0.5, 0.5, 0.5) == (0.5, 0.5, 0.5)


def test_storage_order_is_red_fastest() -> None:
    lut = _corner_lut()
    assert sample(lut, 0.0, 0.0, 0.0) == (0.0, 0.0, 0.0)
    r, g, b = sample(lut, 0.9999, 0.0, 0.0)
    assert r > 0.99 and g == 0.0 and b == 0.0


def test_identity_lut_preserves_colors() -> None:
    lut = LutDocument.identity(17)
    rng = np.random.default_rng(3)
    colors = np.concatenate([rng.uniform(0.0, 1.0, size=(256, 3)), np.eye(3), np.ones((1, 3))])
    out = sample_array(lut, colors)
    assert np.allclose(out, colors, atol=1e-5)


def test_boundary_clamp_at_one() -> None:
    lut = _lut_from(17, lambda x: x**2)
    below = 1.0 - EPSILON / 1000.0
    assert sample(lut, 1.0, 1.0, 1.0) == sample(lut, below, below, below)


def test_out_of_range_queries_saturate() -> None:
    lut = _lut_from(9, lambda x: 1.0 - x)
    assert sample(lut, -3.0, 0.0, 0.0) == sample(lut, 0.0, 0.0, 0.0)
    assert sample(lut, 5.0, 0.5, 0.5) == sample(lut, 1.0, 0.5, 0.5)


def test_values_outside_unit_range_are_not_clamped() -> None:
    lut = _lut_from(5, lambda x: x * 4.0 - 1.0)
    r, g, b = sample(lut, 0.0, 0.5, 0.5)
    assert r == -1.0
    assert g == 1.0


def test_alpha_is_not_returned() -> None:
    lut = LutDocument.identity(2)
    assert sample_array(lut, np.zeros((4, 4, 3))).shape == (4, 4, 3)


def test_domain_is_normalized() -> None:
    base = LutDocument.identity(5)
    wide = LutDocument(size=5, samples=base.samples, domain_min=(0.0, 0.0, 0.0), domain_max=(2.0, 2.0, 2.0))
    assert np.allclose(sample(wide, 1.0, 0.5, 0.25), (0.5, 0.25, 0.125))


def test_scalar_and_vector_paths_agree() -> None:
    lut = _lut_from(7, lambda x: np.sqrt(x))
    colors = np.array([[0.1, 0.7, 0.3], [0.95, 0.05, 0.5]])
    out = sample_array(lut, colors)
    for color, expected in zip(colors, out):
        assert sample(lut, *color) == tuple(expected)
