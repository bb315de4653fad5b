"""Structured CSV metadata produced by ingestion.

All outputs are immutable, machine-readable structured objects.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class DateFormat(str, Enum):
    """Supported date shapes, in matching priority order."""

    YYYY_MM_DD = "YYYY-MM-DD"
    YYYY_MM = "YYYY-MM"
    YYYY = "YYYY"
    MM_DD_YYYY = "MM/DD/YYYY"
    MM_YYYY = "MM/YYYY"

    @property
    def pattern(self) -> re.Pattern:
        """Anchored regular expression for this date shape."""
        return DATE_PATTERNS[self]


DATE_PATTERNS: dict[DateFormat, re.Pattern] = {
    DateFormat.YYYY_MM_DD: re.compile(r"^\d{4}-\d{2}-\d{2}$"),
    DateFormat.YYYY_MM: re.compile(r"^\d{4}-\d{2}$"),
    DateFormat.YYYY: re.compile(r"^\d{4}$"),
    DateFormat.MM_DD_YYYY: re.compile(r"^\d{2}/\d{2}/\d{4}$"),
    DateFormat.MM_YYYY: re.compile(r"^\d{2}/\d{4}$"),
}

DEFAULT_DATE_FORMAT = DateFormat.YYYY_MM_DD


class DetectionConfidence:
    """How the date column of a CSVMetadata was chosen."""

    DETECTED = "detected"  # column name or sample values matched
    FALLBACK = "fallback"  # nothing matched, first column forced
    NONE = "none"  # no preview rows, no date column
    SYNTHETIC = "synthetic"  # placeholder metadata, nothing was analyzed


@dataclass(frozen=True)
class CSVMetadata:
    """Description of one CSV table.

    ``date_column`` is never a member of ``value_columns``.
    """

    filename: str
    filepath: str
    columns: tuple[str, ...]
    date_column: Optional[str]
    value_columns: tuple[str, ...]
    row_count: int
    data_preview: tuple[tuple[str, ...], ...]
    estimated_date_format: Optional[str]
    has_headers: bool
    synthetic: bool = False
    date_column_confidence: str = DetectionConfidence.DETECTED

    @property
    def needs_confirmation(self) -> bool:
        """True when the date column is a guess a caller should confirm."""
        return self.date_column_confidence != DetectionConfidence.DETECTED

    def to_dict(self) -> dict[str, Any]:
        """Convert metadata to a dictionary using the manifest's camelCase keys."""
        return {
            "filename": self.filename,
            "filepath": self.filepath,
            "columns": list(self.columns),
            "dateColumn": self.date_column,
            "valueColumns": list(self.value_columns),
            "rowCount": self.row_count,
            "dataPreview": [list(row) for row in self.data_preview],
            "estimatedDateFormat": self.estimated_date_format,
            "hasHeaders": self.has_headers,
            "synthetic": self.synthetic,
            "dateColumnConfidence": self.date_column_confidence,
        }


@dataclass
class DataLoadResult:
    """Outcome of analyzing a batch of CSV sources."""

    csv_files: list[CSVMetadata] = field(default_factory=list)
    total_files: int = 0
    valid_files: int = 0
    errors: list[str] = field(default_factory=list)
