"""Tests for covid_portal/mappers.py"""

from decimal import Decimal

from covid_portal.mappers import district_from_row, state_from_row, stats_from_row


def test_state_from_row_uses_camel_case_on_the_wire():
    state = state_from_row({"state_id": 3, "state_name": "Goa", "population": 1458545})
    assert state.model_dump(by_alias=True) == {"stateId": 3, "stateName": "Goa", "population": 1458545}


def test_district_from_row():
    row = {
        "district_id": 7,
        "district_name": "Krishna",
        "state_id": 2,
        "cases": 10,
        "cured": 5,
        "active": 4,
        "deaths": 1,
    }
    assert district_from_row(row).model_dump(by_alias=True) == {
        "districtId": 7,
        "districtName": "Krishna",
        "stateId": 2,
        "cases": 10,
        "cured": 5,
        "active": 4,
        "deaths": 1,
    }


def test_stats_from_row_keeps_null_sums():
    stats = stats_from_row({"total_cases": None, "total_cured": None, "total_active": None, "total_deaths": None})
    assert stats.model_dump(by_alias=True) == {
        "totalCases": None,
        "totalCured": None,
        "totalActive": None,
        "totalDeaths": None,
    }


def test_stats_from_row_converts_decimal_sums():
    stats = stats_from_row({"total_cases": Decimal("12"), "total_cured": 1, "total_active": 0, "total_deaths": None})
    assert stats.total_cases == 12
    assert stats.total_deaths is None


def test_stats_from_row():
    stats = stats_from_row({"total_cases": 200, "total_cured": 170, "total_active": 23, "total_deaths": 7})
    assert stats.total_cases == 200
    assert stats.total_deaths == 7
