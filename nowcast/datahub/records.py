from dataclasses import dataclass
from typing import Optional

RECORD_COLUMNS = ("country", "region", "date", "indicator", "predicted", "predicted_error")


@dataclass(frozen=True)
class IndicatorRecord:
    """One (entity, time, indicator) estimate flattened out of an API response."""

    country: str
    region: Optional[str]
    date: str
    indicator: str
    predicted: Optional[float]
    predicted_error: Optional[float]
