from __future__ import annotations

import random

from ingestion import DetectionConfidence, classify_columns
from ingestion.column_classifier import is_value_column


def test_date_keyword_in_name() -> None:
    result = classify_columns(["Year", "Sales"], [("2020", "10"), ("2021", "12")])
    assert result.date_column == "Year"
    assert result.value_columns == ("Sales",)
    assert result.confidence == DetectionConfidence.DETECTED


def test_korean_date_keyword() -> None:
    result = classify_columns(["날짜", "값"], [("x", "1")])
    assert result.date_column == "날짜"
    assert result.value_columns == ("값",)


def test_date_detected_from_samples() -> None:
    result = classify_columns(["Period", "A"], [("2020-01", "1"), ("2020-02", "2")])
    assert result.date_column == "Period"
    assert result.value_columns == ("A",)


def test_last_date_candidate_wins() -> None:
    result = classify_columns(["Date", "Month", "A"], [("2020-01", "01/2020", "5")])
    assert result.date_column == "Month"
    assert result.value_columns == ("A",)


def test_falls_back_to_first_column() -> None:
    result = classify_columns(["Id", "Score"], [("1", "10"), ("2", "20")])
    assert result.date_column == "Id"
    assert "Id" not in result.value_columns
    assert result.value_columns == ("Score",)
    assert result.confidence == DetectionConfidence.FALLBACK


def test_no_preview_rows() -> None:
    result = classify_columns(["Date", "A", "A"], [])
    assert result.date_column is None
    assert result.value_columns == ("Date", "A")
    assert result.confidence == DetectionConfidence.NONE


def test_text_columns_are_not_values() -> None:
    result = classify_columns(
        ["Date", "Name", "Score"], [("2020", "Alice", "1"), ("2021", "Bob", "2")]
    )
    assert result.value_columns == ("Score",)


def test_duplicate_value_columns_are_collapsed() -> None:
    result = classify_columns(["Date", "A", "A"], [("2020", "1", "2")])
    assert result.value_columns == ("A",)


def test_duplicate_of_date_column_is_excluded() -> None:
    result = classify_columns(["Id", "Id", "Score"], [("1", "2", "3")])
    assert result.date_column == "Id"
    assert result.value_columns == ("Score",)


def test_value_threshold() -> None:
    assert is_value_column(["1", "2", "3", "4", "x"])
    assert not is_value_column(["1", "2", "3", "x", "y"])
    assert is_value_column(["1,000", "2,500"])
    assert is_value_column([])


def test_date_column_never_in_value_columns() -> None:
    rng = random.Random(20240601)
    names = ["Date", "Year", "A", "B", "Sales", "Time", "Region", "x"]
    cells = ["2020-01", "2020", "01/2020", "12", "1,000", "3.5", "abc", "", "N/A"]

    for _ in range(500):
        columns = [rng.choice(names) for _ in range(rng.randint(1, 6))]
        preview = [
            tuple(rng.choice(cells) for _ in range(rng.randint(0, len(columns) + 1)))
            for _ in range(rng.randint(0, 5))
        ]
        result = classify_columns(columns, preview)

        assert result.date_column not in result.value_columns
        assert len(set(result.value_columns)) == len(result.value_columns)
        assert set(result.value_columns) <= set(columns)
        if preview:
            assert result.date_column in columns
