"""Tests for typed responses and the nested-record flattener."""

from __future__ import annotations

from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from nowcast.datahub.flatten import flatten_response, iter_records, records_to_frame
from nowcast.datahub.records import RECORD_COLUMNS, IndicatorRecord
from nowcast.datahub.responses import NationalResponse, SubnationalResponse, parse_response
from nowcast.errors import MalformedInput


def _national_payload() -> dict:
    return {
        "CIV": {
            "2024-01": {
                "internet_fm_ratio": {"predicted": 0.82, "predicted_error": 0.05},
                "mobile_fm_ratio": {"predicted": 0.91},
            },
            "2024-02": {
                "internet_fm_ratio": {"predicted": 0.83, "predicted_error": 0.04},
            },
        },
        "GHA": {
            "2024-01": {
                "internet_fm_ratio": {},
            },
        },
    }


# ---------------------------------------------------------------------------
# Typed responses


def test_parse_response_national_variant() -> None:
    response = parse_response({"CIV": {}}, "national")
    assert isinstance(response, NationalResponse)
    assert response.depth == 3
    assert response.level == "national"


def test_parse_response_subnational_variant() -> None:
    response = parse_response({"NGA": {}}, "subnational")
    assert isinstance(response, SubnationalResponse)
    assert response.depth == 4


def test_parse_response_rejects_non_mapping_root() -> None:
    with pytest.raises(MalformedInput):
        parse_response([1, 2, 3], "national")


def test_parse_response_rejects_unknown_level() -> None:
    with pytest.raises(MalformedInput):
        parse_response({}, "continental")


# ---------------------------------------------------------------------------
# Flattening


def test_single_leaf_example() -> None:
    payload = {"CIV": {"2024-01": {"internet_fm_ratio": {"predicted": 0.82}}}}
    records = list(flatten_response(payload, "national"))
    assert records == [
        IndicatorRecord(
            country="CIV",
            region=None,
            date="2024-01",
            indicator="internet_fm_ratio",
            predicted=0.82,
            predicted_error=None,
        )
    ]


def test_one_record_per_leaf() -> None:
    records = list(flatten_response(_national_payload(), "national"))
    keys = {(r.country, r.date, r.indicator) for r in records}
    assert len(records) == 3
    assert keys == {
        ("CIV", "2024-01", "internet_fm_ratio"),
        ("CIV", "2024-01", "mobile_fm_ratio"),
        ("CIV", "2024-02", "internet_fm_ratio"),
    }


def test_missing_optional_fields_become_none() -> None:
    records = {(r.country, r.date, r.indicator): r for r in flatten_response(_national_payload(), "national")}
    mobile = records[("CIV", "2024-01", "mobile_fm_ratio")]
    assert mobile.predicted == pytest.approx(0.91)
    assert mobile.predicted_error is None


def test_empty_branches_contribute_nothing() -> None:
    payload = {
        "CIV": {},
        "GHA": {"2024-01": {}},
        "SEN": None,
        "TGO": {"2024-01": {"internet_fm_ratio": None}},
        "BEN": {"2024-01": {"internet_fm_ratio": {}}},
    }
    assert list(flatten_response(payload, "national")) == []


def test_subnational_records_carry_region() -> None:
    payload = {
        "NGA": {
            "NGA.1_1": {"2024-01": {"internet_fm_ratio": {"predicted": 0.6, "predicted_error": 0.1}}},
            "NGA.2_1": {"2024-01": {"internet_fm_ratio": {"predicted": 0.7}}},
        }
    }
    records = sorted(flatten_response(payload, "subnational"), key=lambda r: r.region or "")
    assert [r.region for r in records] == ["NGA.1_1", "NGA.2_1"]
    assert all(r.country == "NGA" for r in records)
    assert records[0].predicted_error == pytest.approx(0.1)


def test_scalar_where_mapping_expected_raises() -> None:
    payload = {"CIV": {"2024-01": 0.82}}
    with pytest.raises(MalformedInput) as excinfo:
        list(flatten_response(payload, "national"))
    assert "CIV/2024-01" in str(excinfo.value)


def test_list_where_mapping_expected_raises() -> None:
    payload = {"NGA": ["NGA.1_1"]}
    with pytest.raises(MalformedInput):
        list(flatten_response(payload, "subnational"))


def test_non_numeric_leaf_value_raises() -> None:
    payload = {"CIV": {"2024-01": {"internet_fm_ratio": {"predicted": "high"}}}}
    with pytest.raises(MalformedInput):
        list(flatten_response(payload, "national"))


def test_iter_records_is_lazy() -> None:
    payload = {
        "CIV": {"2024-01": {"internet_fm_ratio": {"predicted": 0.8}}},
        "GHA": "broken",
    }
    iterator = iter_records(parse_response(payload, "national"))
    first = next(iterator)
    assert first.country == "CIV"
    with pytest.raises(MalformedInput):
        next(iterator)


def test_records_to_frame_columns() -> None:
    df = records_to_frame(flatten_response(_national_payload(), "national"))
    assert list(df.columns) == list(RECORD_COLUMNS)
    assert len(df) == 3
    assert df["predicted_error"].isna().sum() == 1


def test_records_to_frame_empty() -> None:
    df = records_to_frame([])
    assert list(df.columns) == list(RECORD_COLUMNS)
    assert df.empty
