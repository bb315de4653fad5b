"""Constants for the render ledger.

This module defines ledger filenames, output subdirectories and limits.
"""

LEDGER_FILENAME = ".metadata.json"
LOCK_SUFFIX = ".lock"
EXPORT_FILENAME = "render-history.csv"

# Output subdirectories created on initialization
OUTPUT_SUBDIRECTORIES = ("production", "test", "drafts", "batch")

# Categories accepted by the suggested path generator
RENDER_CATEGORIES = ("production", "test", "draft")

DEFAULT_MAX_HISTORY = 100
RECENT_RENDERS_IN_REPORT = 5

EXPORT_COLUMNS = [
    "ID",
    "Timestamp",
    "Composition",
    "Format",
    "Quality",
    "File Size",
    "Duration",
    "Render Time",
    "Success",
    "Error",
]
