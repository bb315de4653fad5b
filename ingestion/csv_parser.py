"""Line-level CSV parsing for ingestion.

This module splits raw CSV text into lines and lines into fields. The parser is
intentionally forgiving: malformed quoting degrades into odd field boundaries
rather than an error, so every line always yields at least one field.
"""

import math
import re
from typing import Sequence

DELIMITER = ","
QUOTE = '"'

_EDGE_QUOTES = re.compile(r'^"|"$')


def split_csv_lines(content: str) -> list[str]:
    """Split CSV content into non-blank lines.

    The content is trimmed as a whole and split on newlines; lines that are
    empty or whitespace-only are dropped. Carriage returns are left in place
    and removed later by field trimming.

    Args:
        content: Raw CSV text

    Returns:
        List of non-blank lines in file order
    """
    return [line for line in content.strip().split("\n") if line.strip()]


def parse_csv_line(line: str) -> list[str]:
    """Parse one CSV line into trimmed field values.

    A double quote toggles the "inside quotes" state and is not kept as a
    literal character. The delimiter only separates fields outside quotes.

    Args:
        line: A single line of CSV text

    Returns:
        Ordered list of field values
    """
    fields = []
    current = []
    in_quotes = False

    for char in line:
        if char == QUOTE:
            in_quotes = not in_quotes
        elif char == DELIMITER and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    fields.append("".join(current).strip())
    return [_EDGE_QUOTES.sub("", field) for field in fields]


def is_numeric_cell(cell: str) -> bool:
    """Return True if the cell holds a number.

    Blank cells, NaN and underscore digit groups are not numbers.
    """
    text = cell.strip()
    if not text or "_" in text:
        return False
    try:
        value = float(text)
    except ValueError:
        return False
    return not math.isnan(value)


def is_numeric_value(cell: str) -> bool:
    """Return True if the cell is numeric once thousands separators are removed."""
    return is_numeric_cell(cell.replace(",", ""))


def column_samples(data_preview: Sequence[Sequence[str]], index: int) -> list[str]:
    """Collect the non-empty cells of one column across the preview rows.

    Rows too short to have the column are skipped.
    """
    return [row[index] for row in data_preview if index < len(row) and row[index]]
