"""Audience-size queries against the social-media marketing API.

Each query asks the delivery-estimate endpoint how many monthly active users
match a targeting spec (country, gender, age band). Credentials travel in an
explicit ``MarketingCredentials`` object rather than shared module state.
"""

from __future__ import annotations

import itertools
import json
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd
import requests

from ..errors import InvalidInput, MalformedInput, RequestFailed
from .config import (
    ENV_FB_ACCESS_TOKEN,
    ENV_FB_ACCOUNT_ID,
    ENV_FB_API_VERSION,
    GENDER_CODES,
    MARKETING_API,
    MAX_AUDIENCE_AGE,
    MIN_AUDIENCE_AGE,
)
from .helpers import optional_float

AUDIENCE_COLUMNS = (
    "country",
    "gender",
    "age_min",
    "age_max",
    "mau_lower",
    "mau_upper",
    "dau",
)


@dataclass(frozen=True)
class MarketingCredentials:
    access_token: str
    account_id: str
    api_version: str = MARKETING_API["api_version"]

    @classmethod
    def from_env(cls) -> "MarketingCredentials":
        """Read credentials from the environment, failing loudly when unset."""
        token = os.environ.get(ENV_FB_ACCESS_TOKEN, "")
        account = os.environ.get(ENV_FB_ACCOUNT_ID, "")
        missing = [name for name, value in ((ENV_FB_ACCESS_TOKEN, token), (ENV_FB_ACCOUNT_ID, account)) if not value]
        if missing:
            raise InvalidInput(f"Missing marketing API credentials: {', '.join(missing)}")
        version = os.environ.get(ENV_FB_API_VERSION) or MARKETING_API["api_version"]
        return cls(access_token=token, account_id=account, api_version=version)

    @property
    def account_path(self) -> str:
        account = self.account_id
        return account if account.startswith("act_") else f"act_{account}"


@dataclass(frozen=True)
class AudienceQuery:
    """One targeting request: a country, a gender bucket and an age band."""

    country: str
    gender: str = "all"
    age_min: int = 18
    age_max: int = 65

    def validate(self) -> None:
        if self.gender not in GENDER_CODES:
            raise InvalidInput(f"Unknown gender '{self.gender}'. Options: {tuple(GENDER_CODES)}")
        if not MIN_AUDIENCE_AGE <= self.age_min <= self.age_max <= MAX_AUDIENCE_AGE:
            raise InvalidInput(
                f"Age range must satisfy {MIN_AUDIENCE_AGE} <= age_min <= age_max <= {MAX_AUDIENCE_AGE}, "
                f"got ({self.age_min}, {self.age_max})"
            )


@dataclass(frozen=True)
class AudienceCount:
    query: AudienceQuery
    mau_lower: Optional[float]
    mau_upper: Optional[float]
    dau: Optional[float]

    def to_row(self) -> Dict[str, Any]:
        return {
            "country": self.query.country,
            "gender": self.query.gender,
            "age_min": self.query.age_min,
            "age_max": self.query.age_max,
            "mau_lower": self.mau_lower,
            "mau_upper": self.mau_upper,
            "dau": self.dau,
        }


def build_targeting_spec(query: AudienceQuery) -> Dict[str, Any]:
    """Translate a query into the marketing API targeting JSON."""
    query.validate()
    return {
        "geo_locations": {"countries": [query.country.upper()]},
        "genders": list(GENDER_CODES[query.gender]),
        "age_min": query.age_min,
        "age_max": query.age_max,
    }


def build_query_grid(
    countries: Iterable[str],
    genders: Sequence[str] = ("male", "female"),
    age_ranges: Sequence[Tuple[int, int]] = ((18, 65),),
) -> List[AudienceQuery]:
    """Cartesian product of countries × genders × age ranges."""
    queries = [
        AudienceQuery(country=country.strip().upper(), gender=gender, age_min=lo, age_max=hi)
        for country, gender, (lo, hi) in itertools.product(countries, genders, age_ranges)
    ]
    for query in queries:
        query.validate()
    return queries


class AudienceClient:
    """Issue delivery-estimate requests for audience queries."""

    def __init__(
        self,
        credentials: MarketingCredentials,
        base_url: str = MARKETING_API["base_url"],
        timeout: float = MARKETING_API["timeout"],
        session: Optional[requests.Session] = None,
    ) -> None:
        self.credentials = credentials
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def endpoint_url(self) -> str:
        creds = self.credentials
        return f"{self.base_url}/{creds.api_version}/{creds.account_path}/delivery_estimate"

    def estimate(self, query: AudienceQuery) -> AudienceCount:
        """Return the MAU/DAU estimate for a single query."""
        url = self.endpoint_url
        params = {
            "access_token": self.credentials.access_token,
            "optimization_goal": MARKETING_API["optimization_goal"],
            "targeting_spec": json.dumps(build_targeting_spec(query)),
        }
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise RequestFailed(f"Audience request failed: {exc}", url=url) from exc
        if response.status_code != 200:
            raise RequestFailed(
                f"Audience request returned HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise MalformedInput("Audience response is not valid JSON") from exc
        return _parse_estimate(query, body)

    def collect(self, queries: Iterable[AudienceQuery], pause: float = 0.0) -> pd.DataFrame:
        """Run every query, skipping (and reporting) the ones that fail."""
        rows: List[Dict[str, Any]] = []
        for idx, query in enumerate(queries):
            if idx and pause > 0:
                # The marketing API rate-limits aggressively per account.
                time.sleep(pause)
            try:
                count = self.estimate(query)
            except (RequestFailed, MalformedInput) as exc:
                print(f"[audience] Skipping {query.country}/{query.gender}/{query.age_min}-{query.age_max}: {exc}")
                continue
            rows.append(count.to_row())
        print(f"[audience] Collected {len(rows)} audience estimates.")
        return pd.DataFrame(rows, columns=list(AUDIENCE_COLUMNS))


def _parse_estimate(query: AudienceQuery, body: Any) -> AudienceCount:
    if not isinstance(body, Mapping):
        raise MalformedInput(f"Audience response must be a JSON object, got {type(body).__name__}")
    data = body.get("data")
    if not isinstance(data, list) or not data or not isinstance(data[0], Mapping):
        raise MalformedInput("Audience response is missing a 'data' entry")
    entry = data[0]
    return AudienceCount(
        query=query,
        mau_lower=optional_float(entry.get("estimate_mau_lower_bound"), ("data", "estimate_mau_lower_bound")),
        mau_upper=optional_float(entry.get("estimate_mau_upper_bound"), ("data", "estimate_mau_upper_bound")),
        dau=optional_float(entry.get("estimate_dau"), ("data", "estimate_dau")),
    )


__all__ = [
    "AUDIENCE_COLUMNS",
    "AudienceClient",
    "AudienceCount",
    "AudienceQuery",
    "MarketingCredentials",
    "build_query_grid",
    "build_targeting_spec",
]
