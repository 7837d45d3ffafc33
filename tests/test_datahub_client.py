"""Tests for the estimates API client and the estimates pipeline."""

from __future__ import annotations

from pathlib import Path
import sys
from typing import Mapping

import pytest
import requests

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from nowcast.datahub.client import EstimatesClient
from nowcast.datahub.io import read_dataset
from nowcast.datahub.pipeline import EstimatesRequest, prepare_estimates
from nowcast.datahub.responses import NationalResponse, SubnationalResponse
from nowcast.errors import MalformedInput, RequestFailed

from stubs import StubResponse, StubSession

BASE_URL = "https://estimates.example.org"


def _payload_for(code: str) -> dict:
    return {code: {"2024-01": {"internet_fm_ratio": {"predicted": 0.8, "predicted_error": 0.02}}}}


# ---------------------------------------------------------------------------
# Single requests


def test_fetch_national_sends_query_parameters() -> None:
    session = StubSession(response=StubResponse(200, _payload_for("CIV")))
    client = EstimatesClient(base_url=BASE_URL + "/", session=session)  # type: ignore[arg-type]

    response = client.fetch_national(["civ", "gha"], "2024-01", "2024-03")

    assert isinstance(response, NationalResponse)
    call = session.calls[0]
    assert call["url"] == f"{BASE_URL}/query_national"
    assert call["params"] == {"start_date": "2024-01", "end_date": "2024-03", "country": "CIV,GHA"}


def test_fetch_subnational_uses_region_parameter() -> None:
    session = StubSession(response=StubResponse(200, {"NGA": {}}))
    client = EstimatesClient(base_url=BASE_URL, session=session)  # type: ignore[arg-type]

    response = client.fetch_subnational(["NGA.1_1"], "2024-01", "2024-01")

    assert isinstance(response, SubnationalResponse)
    assert session.calls[0]["url"].endswith("/query_subnational")
    assert session.calls[0]["params"]["region"] == "NGA.1_1"


def test_base_url_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NOWCAST_API_BASE_URL", "https://mirror.example.org")
    client = EstimatesClient(session=StubSession())  # type: ignore[arg-type]
    assert client.endpoint_url("national") == "https://mirror.example.org/query_national"


def test_non_200_raises_request_failed() -> None:
    session = StubSession(response=StubResponse(503, {"detail": "down"}))
    client = EstimatesClient(base_url=BASE_URL, session=session)  # type: ignore[arg-type]
    with pytest.raises(RequestFailed) as excinfo:
        client.fetch("national", ["CIV"], "2024-01", "2024-01")
    assert excinfo.value.status_code == 503
    assert excinfo.value.url.endswith("/query_national")


def test_transport_error_raises_request_failed() -> None:
    session = StubSession(handler=lambda url, params: requests.Timeout("slow"))
    client = EstimatesClient(base_url=BASE_URL, session=session)  # type: ignore[arg-type]
    with pytest.raises(RequestFailed) as excinfo:
        client.fetch("national", ["CIV"], "2024-01", "2024-01")
    assert excinfo.value.status_code is None


def test_invalid_json_raises_malformed_input() -> None:
    session = StubSession(response=StubResponse(200, invalid_json=True))
    client = EstimatesClient(base_url=BASE_URL, session=session)  # type: ignore[arg-type]
    with pytest.raises(MalformedInput):
        client.fetch("national", ["CIV"], "2024-01", "2024-01")


def test_fetch_requires_codes() -> None:
    client = EstimatesClient(base_url=BASE_URL, session=StubSession())  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        client.fetch("national", [], "2024-01", "2024-01")


def test_unknown_level_rejected() -> None:
    client = EstimatesClient(base_url=BASE_URL, session=StubSession())  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        client.endpoint_url("global")


# ---------------------------------------------------------------------------
# Bulk retrieval


def _bulk_handler(url: str, params: Mapping[str, str]):
    code = params["country"]
    if code == "SEN":
        return StubResponse(500, None)
    if code == "TGO":
        return StubResponse(200, {"TGO": {"2024-01": ["not", "a", "mapping"]}})
    return StubResponse(200, _payload_for(code))


def test_fetch_many_skips_failures_and_continues() -> None:
    session = StubSession(handler=_bulk_handler)
    client = EstimatesClient(base_url=BASE_URL, session=session)  # type: ignore[arg-type]

    result = client.fetch_many(["CIV", "SEN", "TGO", "GHA"], "national", "2024-01", "2024-01")

    assert len(session.calls) == 4
    assert {r.country for r in result.records} == {"CIV", "GHA"}
    assert result.failed_codes == ["SEN", "TGO"]
    assert isinstance(result.failures[0][1], RequestFailed)
    assert isinstance(result.failures[1][1], MalformedInput)
    assert not result.ok
    with pytest.raises(RequestFailed):
        result.raise_for_failures()


def test_fetch_many_all_ok() -> None:
    session = StubSession(handler=_bulk_handler)
    client = EstimatesClient(base_url=BASE_URL, session=session)  # type: ignore[arg-type]
    result = client.fetch_many(["CIV"], "national", "2024-01", "2024-01")
    assert result.ok
    result.raise_for_failures()


# ---------------------------------------------------------------------------
# Request parsing and the end-to-end pipeline


def test_estimates_request_normalizes_codes() -> None:
    request = EstimatesRequest.from_flags("national", ["civ,gha", "CIV"], "2024-01", "2024-06")
    assert request.codes == ("CIV", "GHA")
    assert request.start_date == "2024-01"


def test_estimates_request_validation() -> None:
    with pytest.raises(ValueError):
        EstimatesRequest.from_flags("planetary", ["CIV"])
    with pytest.raises(ValueError):
        EstimatesRequest.from_flags("national", [])
    with pytest.raises(ValueError):
        EstimatesRequest.from_flags("national", ["CIV"], "2024-06", "2024-01")


def test_prepare_estimates_writes_successful_records(tmp_path: Path) -> None:
    session = StubSession(handler=_bulk_handler)
    client = EstimatesClient(base_url=BASE_URL, session=session)  # type: ignore[arg-type]
    request = EstimatesRequest.from_flags("national", ["CIV", "SEN"], "2024-01", "2024-01")
    output = tmp_path / "out" / "estimates.csv"

    result = prepare_estimates(request, output, client=client)

    assert output.exists()
    df = read_dataset(output)
    assert list(df["country"]) == ["CIV"]
    assert df["region"].isna().all()
    assert result.failed_codes == ["SEN"]


def test_estimates_request_rejects_unpadded_months() -> None:
    with pytest.raises(ValueError):
        EstimatesRequest.from_flags("national", ["CIV"], "2024-1", "2024-03")
    with pytest.raises(ValueError):
        EstimatesRequest.from_flags("national", ["CIV"], "2024-01", "2024-13")
    with pytest.raises(ValueError):
        EstimatesRequest.from_flags("national", ["CIV"], "2024-01\n", "2024-03")


# ---------------------------------------------------------------------------
# Code arguments given as plain strings


def test_fetch_many_splits_comma_separated_string() -> None:
    session = StubSession(handler=_bulk_handler)
    client = EstimatesClient(base_url=BASE_URL, session=session)  # type: ignore[arg-type]

    result = client.fetch_many("civ, GHA", "national", "2024-01", "2024-01")

    assert [call["params"]["country"] for call in session.calls] == ["CIV", "GHA"]
    assert result.ok


def test_fetch_single_code_string_is_not_split_into_letters() -> None:
    session = StubSession(handler=_bulk_handler)
    client = EstimatesClient(base_url=BASE_URL, session=session)  # type: ignore[arg-type]

    client.fetch_many("CIV", "national", "2024-01", "2024-01")
    client.fetch("national", "CIV,GHA", "2024-01", "2024-01")

    assert [call["params"]["country"] for call in session.calls] == ["CIV", "CIV,GHA"]


def test_fetch_national_returns_typed_response_for_string_codes() -> None:
    session = StubSession(response=StubResponse(200, _payload_for("CIV")))
    client = EstimatesClient(base_url=BASE_URL, session=session)  # type: ignore[arg-type]
    assert isinstance(client.fetch_national("CIV", "2024-01", "2024-01"), NationalResponse)
