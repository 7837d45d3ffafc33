"""Flatten nested estimates responses into one record per indicator leaf."""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping, Optional, Tuple

import pandas as pd

from .helpers import ensure_mapping, optional_float
from .records import RECORD_COLUMNS, IndicatorRecord
from .responses import EstimatesResponse, NationalResponse, SubnationalResponse, parse_response

Path = Tuple[str, ...]


def iter_records(response: EstimatesResponse) -> Iterator[IndicatorRecord]:
    """Yield IndicatorRecords lazily from a typed response.

    Branches and leaves that are empty or null contribute nothing. A node that should be a
    mapping but holds a scalar or list raises MalformedInput.
    """
    if isinstance(response, SubnationalResponse):
        for country, regions in _children(response.payload, ()):
            for region, dates in _children(regions, (country,)):
                yield from _iter_dates(dates, country, region, (country, region))
    elif isinstance(response, NationalResponse):
        for country, dates in _children(response.payload, ()):
            yield from _iter_dates(dates, country, None, (country,))
    else:
        raise TypeError(f"Unsupported response type {type(response)}")


def flatten_response(payload: Any, level: str) -> Iterator[IndicatorRecord]:
    """Parse a decoded JSON payload for ``level`` and flatten it."""
    return iter_records(parse_response(payload, level))


def records_to_frame(records: Iterable[IndicatorRecord]) -> pd.DataFrame:
    """Collect records into a DataFrame with a fixed column order."""
    rows = [
        (r.country, r.region, r.date, r.indicator, r.predicted, r.predicted_error)
        for r in records
    ]
    df = pd.DataFrame(rows, columns=list(RECORD_COLUMNS))
    df["predicted"] = pd.to_numeric(df["predicted"], errors="coerce")
    df["predicted_error"] = pd.to_numeric(df["predicted_error"], errors="coerce")
    return df


def _iter_dates(
    dates: Any,
    country: str,
    region: Optional[str],
    path: Path,
) -> Iterator[IndicatorRecord]:
    for date, indicators in _children(dates, path):
        date_path = path + (date,)
        for indicator, leaf in _children(indicators, date_path):
            leaf_path = date_path + (indicator,)
            if leaf is None:
                continue
            values = ensure_mapping(leaf, leaf_path)
            if not values:
                continue
            yield IndicatorRecord(
                country=country,
                region=region,
                date=date,
                indicator=indicator,
                predicted=optional_float(values.get("predicted"), leaf_path + ("predicted",)),
                predicted_error=optional_float(
                    values.get("predicted_error"), leaf_path + ("predicted_error",)
                ),
            )


def _children(node: Any, path: Path) -> Iterator[Tuple[str, Any]]:
    """Iterate (key, child) pairs of a mapping node; a null node has no children."""
    if node is None:
        return
    mapping: Mapping[str, Any] = ensure_mapping(node, path)
    for key, child in mapping.items():
        yield str(key), child


__all__ = ["flatten_response", "iter_records", "records_to_frame"]
