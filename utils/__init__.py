"""Shared utilities for the Bar Chart Race toolkit.

This module provides common utilities used across the application.
"""

from .constants import (
    APP_NAME,
    APP_VERSION,
    DEFAULT_OUTPUT_DIR,
    EXIT_INPUT_ERROR,
    EXIT_INVALID_CONFIG,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    SUPPORTED_CONFIG_FORMATS,
    SUPPORTED_DATASET_FORMATS,
)
from .file_helpers import (
    FileHelperError,
    LockAcquisitionError,
    PathValidationError,
    ensure_directory,
    exclusive_lock,
    generate_render_id,
    safe_read_json,
    safe_write_dataframe,
    safe_write_json,
    get_file_extension,
    is_remote_source,
    is_supported_config_format,
    is_supported_dataset_format,
    parse_iso_timestamp,
    sanitize_path_component,
    utc_now_iso,
    validate_path_safe,
)
from .logging import get_logger, setup_logging

__all__ = [
    "FileHelperError",
    "safe_read_json",
    "safe_write_dataframe",
    "safe_write_json",
    "APP_NAME",
    "APP_VERSION",
    "DEFAULT_OUTPUT_DIR",
    "EXIT_INPUT_ERROR",
    "EXIT_INVALID_CONFIG",
    "EXIT_RUNTIME_ERROR",
    "EXIT_SUCCESS",
    "SUPPORTED_CONFIG_FORMATS",
    "SUPPORTED_DATASET_FORMATS",
    "LockAcquisitionError",
    "PathValidationError",
    "ensure_directory",
    "exclusive_lock",
    "generate_render_id",
    "get_file_extension",
    "get_logger",
    "is_remote_source",
    "is_supported_config_format",
    "is_supported_dataset_format",
    "parse_iso_timestamp",
    "sanitize_path_component",
    "setup_logging",
    "utc_now_iso",
    "validate_path_safe",
]
