"""Typed wrappers around the nested estimates-API payloads.

The API returns bare JSON trees whose depth depends on the requested
granularity. Wrapping them in explicit variants lets the flattener dispatch on
a declared ``depth`` instead of guessing from the data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Mapping, Union

from ..errors import MalformedInput
from .helpers import ensure_mapping

Level = Literal["national", "subnational"]
LEVELS: tuple[Level, ...] = ("national", "subnational")


@dataclass(frozen=True)
class NationalResponse:
    """country → date → indicator → leaf."""

    payload: Mapping[str, Any]
    level: Literal["national"] = "national"
    depth: int = 3


@dataclass(frozen=True)
class SubnationalResponse:
    """country → region → date → indicator → leaf."""

    payload: Mapping[str, Any]
    level: Literal["subnational"] = "subnational"
    depth: int = 4


EstimatesResponse = Union[NationalResponse, SubnationalResponse]


def parse_response(payload: Any, level: str) -> EstimatesResponse:
    """Wrap a decoded JSON payload in the variant matching ``level``."""
    root = ensure_mapping(payload, ())
    if level == "national":
        return NationalResponse(payload=root)
    if level == "subnational":
        return SubnationalResponse(payload=root)
    raise MalformedInput(f"Unknown response level '{level}'. Options: {LEVELS}")


__all__ = [
    "EstimatesResponse",
    "LEVELS",
    "Level",
    "NationalResponse",
    "SubnationalResponse",
    "parse_response",
]
