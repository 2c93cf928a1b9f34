from __future__ import annotations

import numpy as np
import pytest

from lutmerge.chain import (
    MAX_CHAIN_LENGTH,
    ChainCapacityError,
    GridResource,
    LutChain,
    bake_chain,
    composite,
    composite_color,
    composite_image,
    render_thumbnail,
)
from lutmerge.lut import LutDocument, sample
from lutmerge.lut.types import grid_coordinates, grid_samples

# 60 degree rotation about the neutral axis.
_HUE_ROTATE = np.array(
    [
        [2.0, -1.0, 2.0],
        [2.0, 2.0, -1.0],
        [-1.0, 2.0, 2.0],
    ]
) / 3.0


def _lut_from(size: int, fn) -> LutDocument:
    return LutDocument(size=size, samples=grid_samples(size, fn(grid_coordinates(size))))


def _hue_rotate_lut() -> LutDocument:
    return _lut_from(17, lambda x: x @ _HUE_ROTATE.T)


def _contrast_lut() -> LutDocument:
    return _lut_from(17, lambda x: x * x * (3.0 - 2.0 * x))


def _invert_lut() -> LutDocument:
    return _lut_from(2, lambda x: 1.0 - x)


def test_empty_chain_is_identity() -> None:
    assert composite_color([], 0.2, 0.4, 0.6) == (0.2, 0.4, 0.6)


def test_identity_lut_at_full_intensity() -> None:
    stages = [(LutDocument.identity(33), 1.0)]
    rng = np.random.default_rng(11)
    colors = rng.uniform(0.0, 1.0, size=(128, 3))
    assert np.allclose(composite(colors, stages), colors, atol=1e-6)


def test_intensity_bounds() -> None:
    lut = _contrast_lut()
    color = (0.8, 0.3, 0.2)
    assert composite_color([(lut, 0.0)], *color) == color
    assert composite_color([(lut, 1.0)], *color) == sample(lut, *color)


def test_half_intensity_is_linear_mix() -> None:
    lut = _invert_lut()
    r, g, b = composite_color([(lut, 0.5)], 0.2, 0.6, 1.0)
    assert np.allclose((r, g, b), (0.5, 0.5, 0.5), atol=1e-4)


def test_chain_order_matters() -> None:
    hue = _hue_rotate_lut()
    contrast = _contrast_lut()
    color = (0.8, 0.3, 0.2)

    hue_then_contrast = composite_color([(hue, 1.0), (contrast, 1.0)], *color)
    contrast_then_hue = composite_color([(contrast, 1.0), (hue, 1.0)], *color)
    assert not np.allclose(hue_then_contrast, contrast_then_hue, atol=1e-3)


def test_each_stage_samples_the_current_color() -> None:
    invert = _invert_lut()
    out = composite_color([(invert, 1.0), (invert, 1.0)], 0.25, 0.5, 0.75)
    assert np.allclose(out, (0.25, 0.5, 0.75), atol=1e-4)


def test_show_original_restores_input() -> None:
    stages = [(_contrast_lut(), 1.0), (_invert_lut(), 0.7)]
    colors = np.array([[0.1, 0.2, 0.3], [0.9, 0.5, 0.0]])
    assert np.array_equal(composite(colors, stages, show_original=True), colors)


def test_only_first_five_stages_are_evaluated() -> None:
    contrast = _contrast_lut()
    stages = [(contrast, 0.5)] * MAX_CHAIN_LENGTH
    color = (0.3, 0.6, 0.9)
    expected = composite_color(stages, *color)
    assert composite_color(stages + [(_invert_lut(), 1.0)], *color) == expected


def test_cached_resource_matches_document_sampling() -> None:
    lut = _hue_rotate_lut()
    colors = np.random.default_rng(5).uniform(0.0, 1.0, size=(64, 3))
    by_document = composite(colors, [(lut, 0.6)])
    by_resource = composite(colors, [(GridResource(lut), 0.6)])
    assert np.array_equal(by_document, by_resource)


def test_composite_image_keeps_alpha() -> None:
    image = np.zeros((2, 3, 4), dtype=np.float32)
    image[..., 3] = 0.25
    out = composite_image(image, [(_invert_lut(), 1.0)])
    assert out.shape == (2, 3, 4)
    assert out.dtype == np.float32
    assert np.allclose(out[..., :3], 1.0, atol=1e-4)
    assert np.all(out[..., 3] == 0.25)


def test_composite_image_rejects_bad_shape() -> None:
    with pytest.raises(ValueError):
        composite_image(np.zeros((4, 4)), [])


def test_bake_chain_grid() -> None:
    contrast = _contrast_lut()
    baked = bake_chain([(contrast, 1.0)], size=5)

    assert baked.size == 5
    assert baked.title == "Merged LUT"
    rgba = baked.samples.reshape(-1, 4)
    assert np.all(rgba[:, 3] == 1.0)

    # index = r + g*size + b*size^2
    idx = 3 + 1 * 5 + 4 * 25
    expected = sample(contrast, 3 / 4, 1 / 4, 4 / 4)
    assert np.allclose(rgba[idx, :3], expected, atol=1e-6)


def test_bake_default_size() -> None:
    baked = bake_chain([(LutDocument.identity(2), 1.0)])
    assert baked.size == 32
    assert baked.samples.shape == (32**3 * 4,)


def test_baked_identity_chain_is_identity_grid() -> None:
    baked = bake_chain([(LutDocument.identity(9), 1.0)], size=9)
    assert np.allclose(baked.samples, LutDocument.identity(9).samples, atol=1e-4)


def test_render_thumbnail_single_stage() -> None:
    image = np.full((4, 4, 3), 0.2, dtype=np.float32)
    out = render_thumbnail(image, _invert_lut(), intensity=1.0)
    assert np.allclose(out, 0.8, atol=1e-4)


def test_chain_capacity_enforced() -> None:
    chain = LutChain()
    lut = LutDocument.identity(2)
    for i in range(MAX_CHAIN_LENGTH):
        chain.add(f"lut-{i}", lut)

    with pytest.raises(ChainCapacityError):
        chain.add("lut-extra", lut)
    assert len(chain) == MAX_CHAIN_LENGTH


def test_chain_mutators_clamp_and_reorder() -> None:
    chain = LutChain()
    lut = LutDocument.identity(2)
    a = chain.add("a", lut, intensity=1.7)
    b = chain.add("b", lut)
    c = chain.add("a", lut)

    assert a.intensity == 1.0
    assert chain.set_intensity(b.entry_id, -0.3).intensity == 0.0

    chain.move(c.entry_id, 0)
    assert [e.entry_id for e in chain] == [c.entry_id, a.entry_id, b.entry_id]

    assert chain.remove_lut("a") == 2
    assert [e.lut_id for e in chain] == ["b"]

    with pytest.raises(KeyError):
        chain.set_intensity("missing", 0.5)


@pytest.mark.parametrize("capacity", [0, MAX_CHAIN_LENGTH + 1])
def test_chain_capacity_cannot_exceed_limit(capacity: int) -> None:
    with pytest.raises(ValueError):
        LutChain(capacity=capacity)


def test_chain_clear() -> None:
    chain = LutChain()
    chain.add("a", LutDocument.identity(2))
    chain.add("b", LutDocument.identity(2))
    chain.clear()
    assert len(chain) == 0
    assert chain.stages() == []
