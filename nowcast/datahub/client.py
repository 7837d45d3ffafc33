"""HTTP client for the hosted indicator-estimates API."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union, cast

import requests

from ..errors import MalformedInput, NowcastError, RequestFailed
from .config import ENV_API_BASE_URL, ESTIMATES_API
from .flatten import iter_records
from .helpers import safe_codes
from .records import IndicatorRecord
from .responses import LEVELS, EstimatesResponse, NationalResponse, SubnationalResponse, parse_response


@dataclass
class BulkResult:
    """Records gathered from a multi-entity retrieval plus the codes that failed."""

    records: List[IndicatorRecord] = field(default_factory=list)
    failures: List[Tuple[str, NowcastError]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def failed_codes(self) -> List[str]:
        return [code for code, _ in self.failures]

    def raise_for_failures(self) -> None:
        """Re-raise the first failure for callers that prefer abort-all."""
        if self.failures:
            _, error = self.failures[0]
            raise error


class EstimatesClient:
    """Thin wrapper over ``requests`` for the national and subnational endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = ESTIMATES_API["timeout"],
        session: Optional[requests.Session] = None,
    ) -> None:
        resolved = base_url or os.environ.get(ENV_API_BASE_URL) or ESTIMATES_API["base_url"]
        self.base_url = resolved.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def endpoint_url(self, level: str) -> str:
        if level not in LEVELS:
            raise ValueError(f"Unknown level '{level}'. Options: {LEVELS}")
        return f"{self.base_url}/{ESTIMATES_API['endpoints'][level]}"

    def fetch(
        self,
        level: str,
        codes: Union[str, Iterable[str]],
        start_date: str,
        end_date: str,
    ) -> EstimatesResponse:
        """Query one endpoint and return the typed response.

        Raises RequestFailed on transport errors or non-200 status and
        MalformedInput when the body is not a JSON object.
        """
        url = self.endpoint_url(level)
        normalized = safe_codes(codes)
        if not normalized:
            raise ValueError("At least one country or region code is required.")
        params = {
            "start_date": start_date,
            "end_date": end_date,
            ESTIMATES_API["code_params"][level]: ",".join(normalized),
        }
        payload = self._get_json(url, params)
        return parse_response(payload, level)

    def fetch_national(
        self, countries: Union[str, Sequence[str]], start_date: str, end_date: str
    ) -> NationalResponse:
        return cast(NationalResponse, self.fetch("national", countries, start_date, end_date))

    def fetch_subnational(
        self, regions: Union[str, Sequence[str]], start_date: str, end_date: str
    ) -> SubnationalResponse:
        return cast(SubnationalResponse, self.fetch("subnational", regions, start_date, end_date))

    def fetch_many(
        self,
        codes: Union[str, Iterable[str]],
        level: str,
        start_date: str,
        end_date: str,
    ) -> BulkResult:
        """Fetch each code separately so one bad entity does not sink the batch."""
        result = BulkResult()
        for code in safe_codes(codes):
            try:
                response = self.fetch(level, [code], start_date, end_date)
                # Materialize here so a malformed leaf is attributed to this code.
                records = list(iter_records(response))
            except (RequestFailed, MalformedInput) as exc:
                print(f"[estimates] Skipping {code}: {exc}")
                result.failures.append((code, exc))
                continue
            print(f"[estimates] {code}: {len(records)} records")
            result.records.extend(records)
        return result

    def _get_json(self, url: str, params: Mapping[str, str]) -> Any:
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise RequestFailed(f"Request to {url} failed: {exc}", url=url) from exc

        if response.status_code != 200:
            raise RequestFailed(
                f"Request to {url} returned HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedInput(f"Response from {url} is not valid JSON") from exc


__all__ = ["BulkResult", "EstimatesClient"]
