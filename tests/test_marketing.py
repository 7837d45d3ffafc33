"""Tests for marketing-API audience queries."""

from __future__ import annotations

import json
from pathlib import Path
import sys
from typing import Mapping

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from nowcast.datahub.marketing import (
    AUDIENCE_COLUMNS,
    AudienceClient,
    AudienceQuery,
    MarketingCredentials,
    build_query_grid,
    build_targeting_spec,
)
from nowcast.errors import InvalidInput, MalformedInput, RequestFailed

from stubs import StubResponse, StubSession

CREDS = MarketingCredentials(access_token="token-123", account_id="998877", api_version="v19.0")


def _estimate_body(lower: int, upper: int) -> dict:
    return {"data": [{"estimate_mau_lower_bound": lower, "estimate_mau_upper_bound": upper, "estimate_dau": lower // 2}]}


# ---------------------------------------------------------------------------
# Credentials and targeting


def test_credentials_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NOWCAST_FB_ACCESS_TOKEN", "abc")
    monkeypatch.setenv("NOWCAST_FB_ACCOUNT_ID", "act_42")
    monkeypatch.delenv("NOWCAST_FB_API_VERSION", raising=False)
    creds = MarketingCredentials.from_env()
    assert creds.access_token == "abc"
    assert creds.account_path == "act_42"
    assert creds.api_version == "v19.0"


def test_credentials_from_env_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NOWCAST_FB_ACCESS_TOKEN", raising=False)
    monkeypatch.setenv("NOWCAST_FB_ACCOUNT_ID", "42")
    with pytest.raises(InvalidInput) as excinfo:
        MarketingCredentials.from_env()
    assert "NOWCAST_FB_ACCESS_TOKEN" in str(excinfo.value)


def test_build_targeting_spec() -> None:
    spec = build_targeting_spec(AudienceQuery(country="ci", gender="female", age_min=18, age_max=24))
    assert spec == {
        "geo_locations": {"countries": ["CI"]},
        "genders": [2],
        "age_min": 18,
        "age_max": 24,
    }


@pytest.mark.parametrize(
    "query",
    [
        AudienceQuery(country="CI", gender="other"),
        AudienceQuery(country="CI", age_min=10, age_max=20),
        AudienceQuery(country="CI", age_min=40, age_max=30),
    ],
)
def test_invalid_queries_rejected(query: AudienceQuery) -> None:
    with pytest.raises(InvalidInput):
        build_targeting_spec(query)


def test_build_query_grid_is_cartesian() -> None:
    grid = build_query_grid(["ci", "GH"], ["male", "female"], [(18, 24), (25, 65)])
    assert len(grid) == 8
    assert grid[0] == AudienceQuery(country="CI", gender="male", age_min=18, age_max=24)
    assert {q.country for q in grid} == {"CI", "GH"}


# ---------------------------------------------------------------------------
# Client


def test_estimate_parses_delivery_estimate() -> None:
    session = StubSession(response=StubResponse(200, _estimate_body(1000, 1200)))
    client = AudienceClient(CREDS, session=session)  # type: ignore[arg-type]

    count = client.estimate(AudienceQuery(country="CI", gender="male"))

    assert count.mau_lower == pytest.approx(1000)
    assert count.mau_upper == pytest.approx(1200)
    assert count.dau == pytest.approx(500)
    call = session.calls[0]
    assert call["url"] == "https://graph.facebook.com/v19.0/act_998877/delivery_estimate"
    assert call["params"]["access_token"] == "token-123"
    assert json.loads(call["params"]["targeting_spec"])["genders"] == [1]


def test_estimate_http_error() -> None:
    session = StubSession(response=StubResponse(400, {"error": {"message": "bad token"}}))
    client = AudienceClient(CREDS, session=session)  # type: ignore[arg-type]
    with pytest.raises(RequestFailed) as excinfo:
        client.estimate(AudienceQuery(country="CI"))
    assert excinfo.value.status_code == 400


def test_estimate_missing_data_entry() -> None:
    session = StubSession(response=StubResponse(200, {"data": []}))
    client = AudienceClient(CREDS, session=session)  # type: ignore[arg-type]
    with pytest.raises(MalformedInput):
        client.estimate(AudienceQuery(country="CI"))


def test_collect_skips_failed_queries() -> None:
    def handler(url: str, params: Mapping[str, str]):
        spec = json.loads(params["targeting_spec"])
        if spec["geo_locations"]["countries"] == ["GH"]:
            return StubResponse(500, None)
        return StubResponse(200, _estimate_body(2000, 2400))

    client = AudienceClient(CREDS, session=StubSession(handler=handler))  # type: ignore[arg-type]
    df = client.collect(build_query_grid(["CI", "GH"], ["male", "female"]))

    assert list(df.columns) == list(AUDIENCE_COLUMNS)
    assert len(df) == 2
    assert set(df["country"]) == {"CI"}
    assert set(df["gender"]) == {"male", "female"}
