"""Static configuration for API endpoints, auxiliary downloads and data paths."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Tuple, TypedDict


class EstimatesAPIConfig(TypedDict):
    base_url: str
    endpoints: Dict[str, str]
    code_params: Dict[str, str]
    timeout: float


class MarketingAPIConfig(TypedDict):
    base_url: str
    api_version: str
    optimization_goal: str
    timeout: float


class WDIConfig(TypedDict):
    url_template: str
    folder_name: str
    skiprows: int


# Default directories used by the Typer CLI; callers may override these.
DEFAULT_RAW_ROOT = Path("data/raw")
DEFAULT_PROCESSED_ROOT = Path("data/processed")

DEFAULT_START_DATE = "2023-01"
DEFAULT_END_DATE = "2024-01"

# Environment variables consulted when building clients from the CLI.
ENV_API_BASE_URL = "NOWCAST_API_BASE_URL"
ENV_FB_ACCESS_TOKEN = "NOWCAST_FB_ACCESS_TOKEN"
ENV_FB_ACCOUNT_ID = "NOWCAST_FB_ACCOUNT_ID"
ENV_FB_API_VERSION = "NOWCAST_FB_API_VERSION"

# ---------------------------------------------------------------------------
# Service-specific configuration payloads.

ESTIMATES_API: EstimatesAPIConfig = {
    "base_url": "https://api.digitalgendergaps.org",
    "endpoints": {
        "national": "query_national",
        "subnational": "query_subnational",
    },
    # Query parameter carrying the entity codes for each level.
    "code_params": {
        "national": "country",
        "subnational": "region",
    },
    "timeout": 30.0,
}

MARKETING_API: MarketingAPIConfig = {
    "base_url": "https://graph.facebook.com",
    "api_version": "v19.0",
    "optimization_goal": "REACH",
    "timeout": 30.0,
}

WORLD_BANK_WDI: WDIConfig = {
    "url_template": "https://api.worldbank.org/v2/en/indicator/{indicator}?downloadformat=csv",
    "folder_name": "wdi",
    # WDI CSV exports carry four metadata rows above the header.
    "skiprows": 4,
}

# Marketing API gender codes: 1 = male, 2 = female.
GENDER_CODES: Dict[str, Tuple[int, ...]] = {
    "all": (1, 2),
    "male": (1,),
    "female": (2,),
}

DEFAULT_AGE_RANGES: Tuple[Tuple[int, int], ...] = ((18, 65),)

# Marketing API accepts ages in [13, 65]; 65 means "65+".
MIN_AUDIENCE_AGE = 13
MAX_AUDIENCE_AGE = 65


__all__ = [
    "DEFAULT_RAW_ROOT",
    "DEFAULT_PROCESSED_ROOT",
    "DEFAULT_START_DATE",
    "DEFAULT_END_DATE",
    "ENV_API_BASE_URL",
    "ENV_FB_ACCESS_TOKEN",
    "ENV_FB_ACCOUNT_ID",
    "ENV_FB_API_VERSION",
    "ESTIMATES_API",
    "MARKETING_API",
    "WORLD_BANK_WDI",
    "GENDER_CODES",
    "DEFAULT_AGE_RANGES",
    "MIN_AUDIENCE_AGE",
    "MAX_AUDIENCE_AGE",
    "EstimatesAPIConfig",
    "MarketingAPIConfig",
    "WDIConfig",
]
