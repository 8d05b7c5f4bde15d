from __future__ import annotations

from typing import Optional


class ShapefixError(Exception):
    """
    Base exception for all shapefix failures.
    """

    pass


class AcquisitionError(ShapefixError):
    """
    Raised when the raw document bytes cannot be obtained.
    """

    pass


class DocumentSyntaxError(ShapefixError, ValueError):
    """
    Raised when the raw bytes are not well-formed UTF-8 JSON.

    line/column are 1-based and only set when the parser reports them.
    """

    def __init__(self, message: str, *, line: Optional[int] = None, column: Optional[int] = None):
        super().__init__(message)
        self.line = line
        self.column = column


class DecodeError(ShapefixError):
    """
    Raised when a normalized document does not satisfy the user model.

    Never escapes decode_and_report; it is turned into a Failed outcome there.
    """

    def __init__(self, message: str, *, detail=None):
        super().__init__(message)
        self.detail = detail


class RulePackError(ShapefixError, ValueError):
    """
    Raised when a repair rule pack is misconfigured or invalid.
    """

    pass
