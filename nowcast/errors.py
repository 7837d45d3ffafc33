"""Named error conditions surfaced by the nowcasting toolkit."""

from __future__ import annotations

from typing import Optional


class NowcastError(Exception):
    """Base class for every condition raised by this package."""


class MalformedInput(NowcastError, ValueError):
    """A nested API response did not have the expected structure."""


class ShapeMismatch(NowcastError, ValueError):
    """Paired sequences were empty or of different lengths."""


class InvalidInput(NowcastError, ValueError):
    """Input is well-formed but statistically or logically degenerate."""


class MissingGroupKey(NowcastError, KeyError):
    """The grouping column requested for leave-one-group-out is absent."""

    def __str__(self) -> str:
        # KeyError repr-quotes its message; keep it readable.
        return str(self.args[0]) if self.args else ""


class RequestFailed(NowcastError, RuntimeError):
    """An HTTP request returned a non-success status or never completed."""

    def __init__(self, message: str, *, url: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


__all__ = [
    "NowcastError",
    "MalformedInput",
    "ShapeMismatch",
    "InvalidInput",
    "MissingGroupKey",
    "RequestFailed",
]
