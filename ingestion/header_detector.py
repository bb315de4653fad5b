"""Header row detection for ingestion."""

import logging
from typing import Sequence

from .csv_parser import is_numeric_cell, parse_csv_line

logger = logging.getLogger(__name__)


def detect_headers(first_row: Sequence[str], lines: Sequence[str]) -> bool:
    """Decide whether the first row of a table is a header row.

    This is a heuristic: with fewer than two lines a header is assumed.
    Otherwise a header is present only when the first row has no numeric cell
    and the second row has at least one. Every other combination (both rows
    numeric, both textual, or a numeric first row) means "no header".

    Args:
        first_row: Parsed cells of the first line
        lines: All non-blank raw lines of the table

    Returns:
        True if the first row is a header row
    """
    if len(lines) < 2:
        return True

    second_row = parse_csv_line(lines[1])
    first_row_has_numbers = any(is_numeric_cell(cell) for cell in first_row)
    second_row_has_numbers = any(is_numeric_cell(cell) for cell in second_row)

    has_headers = not first_row_has_numbers and second_row_has_numbers
    logger.debug(
        f"Header detection: first_row_numeric={first_row_has_numbers}, "
        f"second_row_numeric={second_row_has_numbers}, has_headers={has_headers}"
    )
    return has_headers


def generate_column_names(count: int) -> list[str]:
    """Generate placeholder column names for a table without headers.

    The first column is always named ``Date``; the rest are ``Column1``,
    ``Column2`` and so on.
    """
    names = ["Date"]
    for index in range(1, count):
        names.append(f"Column{index}")
    return names
