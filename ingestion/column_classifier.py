"""Column classification for CSV previews.

This module partitions the columns of a table into a single temporal column and
a set of numeric value columns, using column names and preview samples.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from .csv_parser import column_samples, is_numeric_value
from .date_format import match_date_format
from .metadata import DetectionConfidence

logger = logging.getLogger(__name__)

DATE_KEYWORDS = ("date", "time", "year", "month", "day", "날짜", "시간")

# Share of samples that must be numeric for a value column
VALUE_COLUMN_THRESHOLD = 0.8


@dataclass(frozen=True)
class ColumnClassification:
    """Result of classifying the columns of a table."""

    date_column: Optional[str]
    value_columns: tuple[str, ...]
    confidence: str


def is_date_column(column_name: str, sample_values: Sequence[str]) -> bool:
    """Return True if the column name or any sample looks like a date."""
    lowered = column_name.lower()
    if any(keyword in lowered for keyword in DATE_KEYWORDS):
        return True
    return any(match_date_format(value) is not None for value in sample_values)


def is_value_column(sample_values: Sequence[str]) -> bool:
    """Return True if enough samples are numeric.

    An empty sample list qualifies.
    """
    numeric_count = sum(1 for value in sample_values if is_numeric_value(value))
    return numeric_count >= len(sample_values) * VALUE_COLUMN_THRESHOLD


def classify_columns(
    columns: Sequence[str], data_preview: Sequence[Sequence[str]]
) -> ColumnClassification:
    """Classify columns into one date column and numeric value columns.

    Columns are scanned left to right. A date candidate takes the single date
    slot (a later candidate replaces an earlier one) and is never a value
    column. Any other column passing the numeric threshold is a value column.
    If no column is a date candidate, the first column is forced into the date
    slot and the result is marked as a fallback.

    Args:
        columns: Column names in table order
        data_preview: Preview rows of raw cells

    Returns:
        ColumnClassification for the table
    """
    if not data_preview:
        logger.debug("No preview rows, treating every column as a value column")
        return ColumnClassification(
            date_column=None,
            value_columns=_unique(columns),
            confidence=DetectionConfidence.NONE,
        )

    date_column = None
    value_columns = []

    for index, column_name in enumerate(columns):
        samples = column_samples(data_preview, index)
        if is_date_column(column_name, samples):
            if date_column is not None:
                logger.debug(f"Date column '{date_column}' replaced by '{column_name}'")
            date_column = column_name
        elif is_value_column(samples):
            value_columns.append(column_name)

    confidence = DetectionConfidence.DETECTED
    if date_column is None and columns:
        date_column = columns[0]
        confidence = DetectionConfidence.FALLBACK
        logger.warning(
            f"No date column detected, falling back to first column '{date_column}'"
        )

    value_columns = [name for name in _unique(value_columns) if name != date_column]
    return ColumnClassification(
        date_column=date_column,
        value_columns=tuple(value_columns),
        confidence=confidence,
    )


def _unique(names: Sequence[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(names))
