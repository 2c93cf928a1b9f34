from __future__ import annotations

import numpy as np
from PIL import Image, ImageOps

from .image_io import from_pil, to_pil


def cover_fit(image: np.ndarray, width: int, height: int) -> np.ndarray:
    """Scale and centre-crop ``image`` so it covers ``width`` x ``height``."""
    if width <= 0 or height <= 0:
        raise ValueError(f"thumbnail size must be positive, got {width}x{height}")
    fitted = ImageOps.fit(to_pil(image), (int(width), int(height)), method=Image.Resampling.BILINEAR, centering=(0.5, 0.5))
    return from_pil(fitted)
