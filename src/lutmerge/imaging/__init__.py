from .image_io import load_image, save_image, write_float_tiff
from .thumbnail import cover_fit

__all__ = ["load_image", "save_image", "write_float_tiff", "cover_fit"]
