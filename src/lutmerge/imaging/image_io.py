from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from PIL import Image, ImageOps


logger = logging.getLogger(__name__)

_TIFF_SUFFIXES = {".tif", ".tiff"}
_JPEG_SUFFIXES = {".jpg", ".jpeg"}


def _high_depth_gray(img: Image.Image) -> np.ndarray:
    # convert("RGB") would clip these modes at 255
    gray = np.asarray(img).astype(np.float32)
    if img.mode != "F":
        gray = gray / 65535.0
    return np.repeat(gray[..., None], 3, axis=-1)


def load_image(path: Path) -> np.ndarray:
    """Read an image as float32 RGB or RGBA in [0, 1]."""
    path = Path(path)
    with Image.open(path) as img:
        img = ImageOps.exif_transpose(img)
        if img.mode.startswith("I;16") or img.mode in ("I", "F"):
            arr = _high_depth_gray(img)
        else:
            has_alpha = img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info
            converted = img.convert("RGBA" if has_alpha else "RGB")
            arr = np.asarray(converted, dtype=np.float32) / 255.0
    logger.debug("loaded image %s shape=%s", path, arr.shape)
    return arr


def to_uint8(image: np.ndarray) -> np.ndarray:
    x = np.clip(np.asarray(image, dtype=np.float32), 0.0, 1.0)
    return np.rint(x * 255.0).astype(np.uint8)


def to_pil(image: np.ndarray) -> Image.Image:
    return Image.fromarray(to_uint8(image))


def from_pil(img: Image.Image) -> np.ndarray:
    return np.asarray(img, dtype=np.float32) / 255.0


def write_float_tiff(path: Path, image: np.ndarray) -> None:
    try:
        import tifffile  # type: ignore
    except Exception as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("tifffile is required for float TIFF output. Install with: pip install '.[io]'") from exc

    arr = np.asarray(image, dtype=np.float32)
    tifffile.imwrite(str(path), arr, photometric="rgb")


def save_image(path: Path, image: np.ndarray, jpeg_quality: int = 95) -> Path:
    """Write ``image`` by file suffix. 8-bit formats clamp to [0, 1]."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    suffix = path.suffix.lower()

    if suffix in _TIFF_SUFFIXES:
        write_float_tiff(path, image)
    elif suffix in _JPEG_SUFFIXES:
        # JPEG has no alpha channel
        to_pil(np.asarray(image)[..., :3]).save(path, quality=int(jpeg_quality))
    else:
        to_pil(image).save(path)

    logger.info("wrote image %s", path)
    return path
