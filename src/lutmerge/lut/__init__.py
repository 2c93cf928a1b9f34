from .base import DataSizeMismatchError, InvalidLutError, LutError, LutFormatError, MissingSizeError
from .cube import dump_cube, format_cube, load_cube, parse_cube, write_cube
from .sampler import sample, sample_array
from .types import LutDocument

__all__ = [
    "DataSizeMismatchError",
    "InvalidLutError",
    "LutError",
    "LutFormatError",
    "MissingSizeError",
    "LutDocument",
    "dump_cube",
    "format_cube",
    "load_cube",
    "parse_cube",
    "write_cube",
    "sample",
    "sample_array",
]
