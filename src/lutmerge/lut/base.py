from __future__ import annotations


class LutError(RuntimeError):
    pass


class InvalidLutError(LutError):
    pass


class LutFormatError(LutError):
    def __init__(self, message: str, line_number: int | None = None) -> None:
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class MissingSizeError(LutFormatError):
    def __init__(self) -> None:
        super().__init__("invalid LUT: LUT_3D_SIZE not found")


class DataSizeMismatchError(LutFormatError):
    def __init__(self, size: int, actual: int, rows: int) -> None:
        n = size * size * size
        self.size = size
        self.expected = (n * 3, n * 4)
        self.actual = actual
        self.rows = rows
        super().__init__(
            f"data size mismatch: expected {n * 3} or {n * 4} values ({n} rows) "
            f"for LUT_3D_SIZE {size}, got {actual} values in {rows} rows"
        )
