"""Constants for the Bar Chart Race toolkit.

This module defines shared constants used across the application.
"""

# Exit codes (matching CLI exit codes)
EXIT_SUCCESS = 0
EXIT_INVALID_CONFIG = 1
EXIT_INPUT_ERROR = 2
EXIT_RUNTIME_ERROR = 3

# Application metadata
APP_NAME = "Bar Chart Race"
APP_VERSION = "1.0.0"

# Supported file formats
SUPPORTED_DATASET_FORMATS = ["csv"]
SUPPORTED_CONFIG_FORMATS = ["yaml", "yml", "json"]

# Default values
DEFAULT_OUTPUT_DIR = "./output"
