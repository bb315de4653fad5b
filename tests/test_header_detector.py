from __future__ import annotations

from ingestion import detect_headers, generate_column_names, parse_csv_line


def _detect(content: str) -> bool:
    lines = content.split("\n")
    return detect_headers(parse_csv_line(lines[0]), lines)


def test_text_row_followed_by_numbers_is_header() -> None:
    assert _detect("Date,YouTube\n2020-01,2000")


def test_single_line_is_assumed_header() -> None:
    assert _detect("2020,100")


def test_two_numeric_rows_have_no_header() -> None:
    assert not _detect("2020,100\n2021,200")


def test_two_text_rows_have_no_header() -> None:
    assert not _detect("Name,Team\nAlice,Red")


def test_numeric_first_row_has_no_header() -> None:
    assert not _detect("2020,100\nName,Team")


def test_generated_column_names() -> None:
    assert generate_column_names(1) == ["Date"]
    assert generate_column_names(4) == ["Date", "Column1", "Column2", "Column3"]
