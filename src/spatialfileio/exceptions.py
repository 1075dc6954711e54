"""Exceptions raised by spatialfileio readers.

Every fatal condition is deterministic for a given input, so none of these
are worth retrying. Partial overlap of a window request is not an error and
is reported through `WindowClampedWarning` instead.
"""

from pathlib import Path
from typing import Any, Optional


class SpatialIOError(Exception):
    """Base exception for all spatialfileio errors."""

    def __init__(self, message: str, path: Optional[Any] = None) -> None:
        self.path = Path(path) if path else None
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.path:
            return f"{self.message} (path: {self.path})"
        return self.message


class MalformedGrid(SpatialIOError):
    """Raised when a text grid body does not match its header."""


class MalformedHeader(MalformedGrid):
    """Raised when a text grid header line is missing, misnamed or unparsable."""

    def __init__(
        self,
        message: str,
        path: Optional[Any] = None,
        *,
        line_number: Optional[int] = None,
        expected_key: Optional[str] = None,
    ) -> None:
        self.line_number = line_number
        self.expected_key = expected_key
        super().__init__(message, path)

    def _format_message(self) -> str:
        parts = [self.message]
        if self.path:
            parts.append(f"path={self.path}")
        if self.line_number is not None:
            parts.append(f"line={self.line_number}")
        if self.expected_key is not None:
            parts.append(f"expected={self.expected_key}")
        if len(parts) == 1:
            return parts[0]
        return f"{parts[0]} ({', '.join(parts[1:])})"


class MalformedDTM(MalformedGrid):
    """Raised when a MAT file lacks the DTM struct or one of its fields."""

    def __init__(self, message: str, path: Optional[Any] = None, *, missing=()) -> None:
        self.missing = tuple(missing)
        super().__init__(message, path)


class UnsupportedTransform(SpatialIOError):
    """Raised for rotated, sheared, south-up or non-square geotransforms."""

    def __init__(self, message: str, path: Optional[Any] = None, *, geotransform=None) -> None:
        self.geotransform = tuple(geotransform) if geotransform is not None else None
        super().__init__(message, path)


class OutOfBounds(SpatialIOError):
    """Raised when no corner of a window request falls inside the dataset."""

    def __init__(self, message: str, path: Optional[Any] = None, *, request=None, extent=None) -> None:
        self.request = request
        self.extent = extent
        super().__init__(message, path)

    def _format_message(self) -> str:
        msg = super()._format_message()
        if self.request is not None and self.extent is not None:
            msg = f"{msg} (request={self.request}, extent={self.extent})"
        return msg


class InvalidRequest(SpatialIOError, ValueError):
    """Raised for inverted or non-finite window bounds."""


class UnrecognizedExtension(SpatialIOError, ValueError):
    """Raised when a file suffix maps to no known dataset kind."""


class WindowClampedWarning(UserWarning):
    """Issued when a window request was clipped to the dataset extent."""
