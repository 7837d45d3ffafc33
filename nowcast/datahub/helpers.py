from __future__ import annotations

import math
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from ..errors import MalformedInput


def format_path(path: Sequence[str]) -> str:
    """Render a response path such as ``CIV/2024-01`` for error messages."""
    return "/".join(path) if path else "<root>"


def ensure_mapping(node: Any, path: Sequence[str]) -> Mapping[str, Any]:
    """Guarantee a response node behaves like a mapping."""
    if isinstance(node, Mapping):
        return node
    raise MalformedInput(
        f"Expected a mapping at {format_path(path)}, got {type(node).__name__}"
    )


def optional_float(value: Any, path: Sequence[str]) -> Optional[float]:
    """Convert an optional numeric leaf value, keeping absent values as None."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise MalformedInput(f"Expected a number at {format_path(path)}, got bool")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise MalformedInput(f"Expected a number at {format_path(path)}, got {value!r}") from exc
    # JSON has no NaN literal, but some servers emit it anyway.
    if math.isnan(number):
        return None
    return number


def safe_codes(value: Any) -> List[str]:
    """Upper-cased codes from None, a comma-separated string, or an iterable of either."""
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip().upper() for item in value.split(",") if item.strip()]
    if isinstance(value, Iterable):
        return [code for item in value for code in safe_codes(item)]
    return safe_codes(str(value))
