"""Error types raised while turning an exam result export into a workbook."""

from __future__ import annotations

from typing import Optional


class ResultFormatError(Exception):
    """Base class for every failure the formatter reports to the user."""


class ReadError(ResultFormatError):
    """Raised when the input file cannot be read."""


class DecodeError(ReadError):
    """Raised when the input bytes cannot be decoded as text."""


class EmptyInputError(ResultFormatError):
    """Raised when the input has no header or no data rows."""


class MalformedRowError(ResultFormatError):
    """Raised in strict mode for a cell that does not fit its column."""

    def __init__(self, message: str, row: Optional[int] = None, column: Optional[str] = None):
        self.row = row
        self.column = column
        location = []
        if row is not None:
            location.append(f"row {row}")
        if column:
            location.append(f"column '{column}'")
        if location:
            message = f"{message} ({', '.join(location)})"
        super().__init__(message)


class InconsistentStudentError(ResultFormatError):
    """Raised in strict mode when rows of one register number disagree."""

    def __init__(self, register_no, field_name: str, first, later):
        self.register_no = register_no
        self.field_name = field_name
        super().__init__(
            f"Register {register_no}: {field_name} changed from {first!r} to {later!r}"
        )
