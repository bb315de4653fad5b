"""Render ledger: history, retention and reporting for rendered videos.

This module records every render attempt for an output directory in a single
JSON ledger, prunes old entries and their files, and summarizes the history.
It does not render anything itself.
"""

from .retention import CleanupResult, RetentionPolicy
from .schemas import (
    OutputFormat,
    ProjectMetadata,
    RenderConfig,
    RenderMetadata,
    RenderOutcome,
    RenderQuality,
)
from .stats import RenderStats, StatsReporter, format_duration_ms, format_file_size
from .store import (
    LedgerCorruptionError,
    LedgerLockError,
    RecordStoreError,
    RenderRecordStore,
)

__all__ = [
    "CleanupResult",
    "RetentionPolicy",
    "OutputFormat",
    "ProjectMetadata",
    "RenderConfig",
    "RenderMetadata",
    "RenderOutcome",
    "RenderQuality",
    "RenderStats",
    "StatsReporter",
    "format_duration_ms",
    "format_file_size",
    "LedgerCorruptionError",
    "LedgerLockError",
    "RecordStoreError",
    "RenderRecordStore",
]
