"""CSV metadata analysis.

This module turns raw CSV text into a structured ``CSVMetadata`` description in
a single pass: header detection, preview extraction, column naming, column
classification and date format estimation. It performs no I/O.
"""

import logging
from typing import Optional

from .column_classifier import classify_columns
from .csv_parser import parse_csv_line, split_csv_lines
from .date_format import estimate_date_format
from .header_detector import detect_headers, generate_column_names
from .metadata import CSVMetadata, DateFormat, DetectionConfidence

logger = logging.getLogger(__name__)

PREVIEW_ROW_LIMIT = 5


class CSVInputError(Exception):
    """Raised when CSV content cannot be analyzed."""

    pass


class EmptyInputError(CSVInputError):
    """Raised when CSV content has no non-blank lines."""

    pass


class UnsupportedContentError(CSVInputError):
    """Raised when the content is not CSV text (binary or undecodable data)."""

    pass


class CSVMetadataAnalyzer:
    """Builds CSVMetadata from raw CSV text.

    This analyzer:
    - Detects whether the first row is a header row
    - Keeps up to five data rows as a preview
    - Classifies columns into one date column and value columns
    - Estimates the date format of the date column
    - Is deterministic and pure
    """

    def __init__(self, preview_rows: int = PREVIEW_ROW_LIMIT):
        """Initialize the analyzer.

        Args:
            preview_rows: Maximum number of data rows kept in the preview
        """
        self.preview_rows = preview_rows

    def analyze(self, filename: str, source: str, content: str) -> CSVMetadata:
        """Analyze CSV content.

        Args:
            filename: Name of the CSV file
            source: Path or URL the content came from
            content: Raw CSV text

        Returns:
            CSVMetadata describing the table

        Raises:
            EmptyInputError: If no non-blank lines remain after trimming
            UnsupportedContentError: If the content contains binary data
        """
        if "\x00" in content:
            raise UnsupportedContentError(
                f"Unsupported content in {filename}: binary data is not CSV text"
            )

        lines = split_csv_lines(content)
        if not lines:
            raise EmptyInputError(f"Empty CSV file: {filename}")

        first_row = parse_csv_line(lines[0])
        has_headers = detect_headers(first_row, lines)

        start_index = 1 if has_headers else 0
        data_preview = tuple(
            tuple(parse_csv_line(line))
            for line in lines[start_index:start_index + self.preview_rows]
        )

        columns = first_row if has_headers else generate_column_names(len(first_row))
        classification = classify_columns(columns, data_preview)

        estimated_date_format: Optional[str] = None
        if classification.date_column is not None:
            estimated_date_format = estimate_date_format(
                data_preview, columns.index(classification.date_column)
            )

        metadata = CSVMetadata(
            filename=filename,
            filepath=source,
            columns=tuple(columns),
            date_column=classification.date_column,
            value_columns=classification.value_columns,
            row_count=self._count_rows(lines, has_headers),
            data_preview=data_preview,
            estimated_date_format=estimated_date_format,
            has_headers=has_headers,
            date_column_confidence=classification.confidence,
        )

        logger.info(
            f"Analyzed {filename}: {metadata.row_count} rows, {len(metadata.columns)} columns, "
            f"date column={metadata.date_column!r} ({metadata.date_column_confidence}), "
            f"{len(metadata.value_columns)} value columns"
        )
        return metadata

    def _count_rows(self, lines: list[str], has_headers: bool) -> int:
        """Count data rows.

        A lone line is assumed to be a header but still counts as one row.
        """
        if has_headers and len(lines) > 1:
            return len(lines) - 1
        return len(lines)


def analyze_csv(filename: str, source: str, content: str) -> CSVMetadata:
    """Analyze CSV content with a default analyzer."""
    return CSVMetadataAnalyzer().analyze(filename, source, content)


def build_synthetic_metadata(filename: str, source: str) -> CSVMetadata:
    """Build placeholder metadata for a CSV source that could not be fetched.

    The shape depends only on the filename: names containing ``test`` get a
    small three-series table, everything else a streaming-platform dataset.
    The result is flagged ``synthetic`` so callers can tell it from real analysis.
    """
    if "test" in filename:
        columns = ("Date", "A", "B", "C")
        row_count = 20
        preview = (("2023-01", "100", "80", "60"),)
    else:
        columns = ("Date", "YouTube", "Netflix", "Disney+", "Amazon Prime", "Hulu")
        row_count = 50
        preview = (("2023-01", "1000", "800", "600", "400", "200"),)

    return CSVMetadata(
        filename=filename,
        filepath=source,
        columns=columns,
        date_column="Date",
        value_columns=columns[1:],
        row_count=row_count,
        data_preview=preview,
        estimated_date_format=DateFormat.YYYY_MM.value,
        has_headers=True,
        synthetic=True,
        date_column_confidence=DetectionConfidence.SYNTHETIC,
    )
