"""Logging utilities for the render ledger.

This module provides structured logging for ledger operations.
"""

import logging

logger = logging.getLogger(__name__)


def log_render_recorded(render_id: str, composition_id: str, success: bool) -> None:
    """Log a render being added to the ledger."""
    status = "success" if success else "failure"
    logger.info(f"Render recorded: {render_id} ({composition_id}, {status})")


def log_cleanup_completed(entries_removed: int, files_deleted: int, space_freed: int) -> None:
    """Log the outcome of a retention pass."""
    logger.info(
        f"Cleanup completed: {entries_removed} entries removed, "
        f"{files_deleted} files deleted, {space_freed} bytes freed"
    )


def log_history_exported(export_path: str, row_count: int) -> None:
    """Log a CSV export of the render history."""
    logger.info(f"Render history exported: {export_path} ({row_count} rows)")


def log_report_generated(render_count: int) -> None:
    """Log report generation."""
    logger.info(f"Render report generated from {render_count} ledger entries")
