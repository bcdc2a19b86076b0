"""
Tests for grouping companies along a dimension.
"""

import pytest

from app.services.companies.aggregation import (
    DIMENSION_KEYS,
    UNKNOWN_KEY,
    group_by_dimension,
    normalize_key,
)
from app.services.companies.types import CompanyDimension, CompanyOut


def _company(code, **fields):
    return CompanyOut(company_code=code, company_name=code, **fields)


def test_level_grouping_matches_dashboard_example():
    c0 = _company("C0")
    c1 = _company("C1", level=1)
    c2 = _company("C2", level=1)

    grouped = group_by_dimension([c0, c1, c2], CompanyDimension.LEVEL)

    assert grouped == {"_unknown": [c0], "1": [c1, c2]}


def test_blank_and_missing_keys_go_to_unknown():
    rows = [
        _company("A", city="Tokyo"),
        _company("B", city="   "),
        _company("C", city=""),
        _company("D"),
        _company("E", city="Tokyo"),
    ]

    grouped = group_by_dimension(rows, CompanyDimension.CITY)

    assert list(grouped) == ["Tokyo", UNKNOWN_KEY]
    assert [c.company_code for c in grouped["Tokyo"]] == ["A", "E"]
    assert [c.company_code for c in grouped[UNKNOWN_KEY]] == ["B", "C", "D"]


@pytest.mark.parametrize("dimension", list(CompanyDimension))
def test_every_record_lands_in_exactly_one_bucket(dimension):
    rows = [
        _company("A", level=1, country="Japan", city="Tokyo"),
        _company("B", level=2, country=None, city="Osaka"),
        _company("C", country="Japan", city=None),
        _company("D", level=1, country=" ", city="Tokyo"),
    ]

    grouped = group_by_dimension(rows, dimension)

    members = [c.company_code for bucket in grouped.values() for c in bucket]
    assert sorted(members) == ["A", "B", "C", "D"]


def test_dimension_string_value_is_accepted():
    grouped = group_by_dimension([_company("A", country="Japan")], "country")
    assert list(grouped) == ["Japan"]


def test_empty_input_gives_empty_mapping():
    assert group_by_dimension([], CompanyDimension.COUNTRY) == {}


def test_every_dimension_has_a_key_function():
    assert set(DIMENSION_KEYS) == set(CompanyDimension)


def test_normalize_key_keeps_non_blank_values_unchanged():
    assert normalize_key(None) == UNKNOWN_KEY
    assert normalize_key("  ") == UNKNOWN_KEY
    assert normalize_key(" Tokyo ") == " Tokyo "
