from __future__ import annotations

import pytest

from ingestion import DateFormat, estimate_date_format
from ingestion.date_format import match_date_format


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2020-01-15", DateFormat.YYYY_MM_DD),
        ("2020-01", DateFormat.YYYY_MM),
        ("2020", DateFormat.YYYY),
        ("01/15/2020", DateFormat.MM_DD_YYYY),
        ("01/2020", DateFormat.MM_YYYY),
        (" 2020-01 ", DateFormat.YYYY_MM),
    ],
)
def test_match_date_format(value: str, expected: DateFormat) -> None:
    assert match_date_format(value) is expected


@pytest.mark.parametrize("value", ["", "Jan 2020", "20-01", "2020/01", "1/1/2020"])
def test_unmatched_values(value: str) -> None:
    assert match_date_format(value) is None


def test_single_sample_yyyy_mm() -> None:
    assert estimate_date_format([("2020-01", "5")], 0) == "YYYY-MM"


def test_single_sample_mm_yyyy() -> None:
    assert estimate_date_format([("01/2020", "5")], 0) == "MM/YYYY"


def test_no_samples_defaults_to_full_date() -> None:
    assert estimate_date_format([], 0) == "YYYY-MM-DD"
    assert estimate_date_format([("", "5")], 0) == "YYYY-MM-DD"


def test_no_matching_samples_defaults_to_full_date() -> None:
    assert estimate_date_format([("Q1 2020",), ("Q2 2020",)], 0) == "YYYY-MM-DD"


def test_majority_of_samples_wins() -> None:
    preview = [("2020",), ("2020-02",), ("2020-03",)]
    assert estimate_date_format(preview, 0) == "YYYY-MM"


def test_tie_goes_to_earlier_shape() -> None:
    preview = [("2020",), ("2020-02",)]
    assert estimate_date_format(preview, 0) == "YYYY-MM"


def test_uses_requested_column() -> None:
    preview = [("A", "2020-01-01"), ("B", "2020-01-02")]
    assert estimate_date_format(preview, 1) == "YYYY-MM-DD"
