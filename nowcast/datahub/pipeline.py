"""High-level orchestration for retrieving estimates and writing them to disk."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple

from .client import BulkResult, EstimatesClient
from .config import DEFAULT_END_DATE, DEFAULT_START_DATE
from .helpers import safe_codes
from .io import write_records
from .responses import LEVELS

MONTH_PATTERN = re.compile(r"\d{4}-(0[1-9]|1[0-2])")


@dataclass(frozen=True)
class EstimatesRequest:
    """Describe which entities to retrieve and over which date window."""

    level: str
    codes: Tuple[str, ...]
    start_date: str = DEFAULT_START_DATE
    end_date: str = DEFAULT_END_DATE

    @classmethod
    def from_flags(
        cls,
        level: str,
        codes: Sequence[str],
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> "EstimatesRequest":
        """Translate CLI flags into a normalized request."""
        if level not in LEVELS:
            raise ValueError(f"Unknown level '{level}'. Options: {LEVELS}")

        # Codes may arrive as repeated flags or one comma-separated string.
        normalized = tuple(dict.fromkeys(code for raw in codes for code in safe_codes(raw)))
        if not normalized:
            raise ValueError("Provide at least one country or region code.")

        start = start_date or DEFAULT_START_DATE
        end = end_date or DEFAULT_END_DATE
        for name, value in (("start_date", start), ("end_date", end)):
            if not MONTH_PATTERN.fullmatch(value):
                raise ValueError(f"{name} must look like YYYY-MM, got '{value}'.")
        # Zero-padded YYYY-MM labels order correctly as strings.
        if start > end:
            raise ValueError(f"start_date {start} is after end_date {end}.")
        return cls(level, normalized, start, end)


def prepare_estimates(
    request: EstimatesRequest,
    output_path: Path,
    client: Optional[EstimatesClient] = None,
) -> BulkResult:
    """
    Fetch every requested entity, flatten the responses and write one CSV.

    Failed entities are reported in the returned BulkResult; the CSV holds
    whatever was retrieved successfully.
    """
    client = client or EstimatesClient()
    print(
        f"[estimates] Fetching {request.level} estimates for {len(request.codes)} codes "
        f"({request.start_date} → {request.end_date})"
    )
    result = client.fetch_many(request.codes, request.level, request.start_date, request.end_date)
    write_records(result.records, output_path)
    print(f"[estimates] Saved {len(result.records)} records → {output_path}")
    if result.failures:
        print(f"[estimates] {len(result.failures)} codes failed: {', '.join(result.failed_codes)}")
    return result


__all__ = ["EstimatesRequest", "prepare_estimates"]
