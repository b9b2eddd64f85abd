"""
Tests for the USASpending and AISHub normalizers.
"""
from datetime import date, datetime, timezone

import pytest

from signal_engine.core.types import SourceUnavailableError
from signal_engine.sources.aishub import BoundingBox, normalize_vessels, vessel_type_from_code
from signal_engine.sources.usaspending import (
    ContractQuery,
    build_search_body,
    normalize_award,
    normalize_awards,
)


# ── USASpending ───────────────────────────────────────────────────────────────

def test_search_body_filters_dod_awards_in_window():
    body = build_search_body(ContractQuery(days=30, min_amount=5e6, limit=15), today=date(2026, 10, 19))

    filters = body["filters"]
    assert filters["time_period"] == [{"start_date": "2026-09-19", "end_date": "2026-10-19"}]
    assert filters["agencies"][0] == {
        "type": "awarding",
        "tier": "toptier",
        "name": "Department of Defense",
    }
    assert filters["award_amounts"] == [{"lower_bound": 5e6}]
    assert body["limit"] == 15
    assert body["sort"] == "Award Amount"
    assert body["order"] == "desc"


@pytest.mark.parametrize("kwargs", [{"days": 400}, {"limit": 0}, {"min_amount": -1}])
def test_contract_query_validation(kwargs):
    with pytest.raises(ValueError):
        ContractQuery(**kwargs)


def test_award_accepts_underscore_keys():
    award = normalize_award(
        {
            "Award_ID": "FA8650-26-C-1234",
            "Recipient_Name": "NORTHROP GRUMMAN SYSTEMS CORP",
            "Award_Amount": "75000000",
            "Description": "B-21 support",
            "Award_Type": "DEFINITIVE CONTRACT",
        }
    )
    assert award.id == "FA8650-26-C-1234"
    assert award.amount == 75_000_000.0
    assert award.recipient == "NORTHROP GRUMMAN SYSTEMS CORP"
    assert award.award_type == "DEFINITIVE CONTRACT"


def test_awards_without_identifier_are_dropped():
    awards = normalize_awards({"results": [{"Recipient Name": "anonymous"}, {"Award ID": "X1"}]})
    assert [a.id for a in awards] == ["X1"]


# ── AISHub ────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "code, expected",
    [(30, "fishing"), (35, "military"), (60, "passenger"), (74, "cargo"), ("89", "tanker"), (52, "other"), (None, "other")],
)
def test_vessel_type_codes(code, expected):
    assert vessel_type_from_code(code) == expected


def test_header_error_is_source_unavailable():
    with pytest.raises(SourceUnavailableError, match="Too frequent requests"):
        normalize_vessels([{"ERROR": True, "ERROR_MESSAGE": "Too frequent requests!"}])


def test_vessels_keep_reported_heading():
    [vessel] = normalize_vessels(
        [
            {"ERROR": False},
            [
                {
                    "MMSI": 211000000, "TIME": "2026-10-19 11:00:00 GMT", "LATITUDE": 36.0,
                    "LONGITUDE": -5.4, "COG": 91.5, "SOG": 14.0, "HEADING": 93, "TYPE": 71,
                    "NAME": "", "DEST": " ALGECIRAS ",
                }
            ],
        ]
    )
    assert vessel.name == "MMSI 211000000"
    assert vessel.heading == 93.0
    assert vessel.destination == "ALGECIRAS"
    assert vessel.length is None
    assert vessel.timestamp == datetime(2026, 10, 19, 11, 0, tzinfo=timezone.utc)


def test_bounding_box_contains():
    box = BoundingBox("gibraltar", 35.5, 36.5, -6.0, -4.5)
    assert box.contains(36.0, -5.4)
    assert not box.contains(37.0, -5.4)
    assert str(box) == "gibraltar"
