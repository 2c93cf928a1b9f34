from .cache import GridResource, LutCache, SamplingResource
from .compositor import BAKE_SIZE, bake_chain, composite, composite_color, composite_image, render_thumbnail
from .model import MAX_CHAIN_LENGTH, ChainCapacityError, ChainEntry, LutChain, clamp_intensity

__all__ = [
    "GridResource",
    "LutCache",
    "SamplingResource",
    "BAKE_SIZE",
    "bake_chain",
    "composite",
    "composite_color",
    "composite_image",
    "render_thumbnail",
    "MAX_CHAIN_LENGTH",
    "ChainCapacityError",
    "ChainEntry",
    "LutChain",
    "clamp_intensity",
]
