"""CSV ingestion and metadata inference.

This module turns raw, possibly malformed CSV text into a structured
description of the table: header presence, column names, the date column,
numeric value columns, a small preview and the estimated date format.
"""

from .analyzer import (
    CSVInputError,
    CSVMetadataAnalyzer,
    EmptyInputError,
    UnsupportedContentError,
    analyze_csv,
    build_synthetic_metadata,
)
from .column_classifier import ColumnClassification, classify_columns
from .csv_parser import is_numeric_cell, parse_csv_line, split_csv_lines
from .date_format import estimate_date_format
from .header_detector import detect_headers, generate_column_names
from .loader import (
    CSVDataLoader,
    CSVFileInfo,
    CSVLoadError,
    FetchError,
    fetch_csv_text,
    infer_template_type,
    read_csv_file,
)
from .manifest import ManifestError, build_manifest, write_manifest
from .metadata import CSVMetadata, DataLoadResult, DateFormat, DetectionConfidence

__all__ = [
    "CSVDataLoader",
    "CSVFileInfo",
    "CSVInputError",
    "CSVLoadError",
    "CSVMetadata",
    "CSVMetadataAnalyzer",
    "ColumnClassification",
    "DataLoadResult",
    "DateFormat",
    "DetectionConfidence",
    "EmptyInputError",
    "FetchError",
    "ManifestError",
    "UnsupportedContentError",
    "analyze_csv",
    "build_manifest",
    "build_synthetic_metadata",
    "classify_columns",
    "detect_headers",
    "estimate_date_format",
    "fetch_csv_text",
    "generate_column_names",
    "infer_template_type",
    "is_numeric_cell",
    "parse_csv_line",
    "read_csv_file",
    "split_csv_lines",
    "write_manifest",
]
