"""Render statistics, reports and CSV export.

This module reads the render ledger and summarizes it. It never mutates the
ledger; every figure is computed from a fresh load.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from utils import FileHelperError, get_logger, safe_write_dataframe

from .schemas import RenderMetadata
from .store import RecordStoreError, RenderRecordStore
from .utils.constants import EXPORT_COLUMNS, EXPORT_FILENAME, RECENT_RENDERS_IN_REPORT
from .utils.logging import log_history_exported, log_report_generated

logger = get_logger(__name__)

_SIZE_UNITS = ("B", "KB", "MB", "GB")


@dataclass
class RenderStats:
    """Aggregate figures over the retained ledger entries."""

    total_renders: int = 0
    successful_renders: int = 0
    failed_renders: int = 0
    total_file_size: float = 0
    total_render_time: float = 0
    average_render_time: float = 0
    success_rate: float = 0
    quality_breakdown: dict[str, int] = field(default_factory=dict)
    format_breakdown: dict[str, int] = field(default_factory=dict)


def format_file_size(size_bytes: float) -> str:
    """Format a byte count as B/KB/MB/GB with one decimal."""
    size = float(size_bytes)
    unit_index = 0
    while size >= 1024 and unit_index < len(_SIZE_UNITS) - 1:
        size /= 1024
        unit_index += 1
    return f"{size:.1f} {_SIZE_UNITS[unit_index]}"


def format_duration_ms(milliseconds: float) -> str:
    """Format milliseconds as ``Xm Ys``."""
    total = int(milliseconds)
    minutes = total // 60000
    seconds = (total % 60000) // 1000
    return f"{minutes}m {seconds}s"


def _renders_frame(renders: list[RenderMetadata]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "format": entry.format,
                "quality": entry.quality,
                "file_size": entry.file_size,
                "render_time": entry.render_time,
                "success": entry.success,
            }
            for entry in renders
        ],
        columns=["format", "quality", "file_size", "render_time", "success"],
    )


def _breakdown(df: pd.DataFrame, column: str) -> dict[str, int]:
    counts = df.groupby(column, sort=False).size()
    return {str(key): int(value) for key, value in counts.items()}


def _export_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class StatsReporter:
    """Summarizes a RenderRecordStore.

    This class:
    - Computes aggregate statistics with pandas
    - Renders a fixed-format text report
    - Exports the render history as CSV
    """

    def __init__(self, store: RenderRecordStore):
        self.store = store

    def get_stats(self) -> RenderStats:
        """Compute statistics over the retained ledger entries.

        ``total_renders`` is the all-time counter; every other figure covers
        the retained entries only.
        """
        metadata = self.store.load_metadata()
        renders = list(metadata.renders)
        stats = RenderStats(total_renders=metadata.total_renders)
        if not renders:
            return stats

        df = _renders_frame(renders)
        successful = df[df["success"]]

        stats.successful_renders = int(len(successful))
        stats.failed_renders = int(len(df) - len(successful))
        stats.total_file_size = _as_number(successful["file_size"].sum())
        stats.total_render_time = _as_number(df["render_time"].sum())
        stats.average_render_time = float(df["render_time"].mean())
        stats.success_rate = stats.successful_renders / len(df) * 100
        stats.quality_breakdown = _breakdown(df, "quality")
        stats.format_breakdown = _breakdown(df, "format")
        return stats

    def generate_report(self, now: Optional[datetime] = None) -> str:
        """Render the text report.

        Args:
            now: Time printed on the ``Generated`` line (defaults to local now)

        Returns:
            Multi-line report text
        """
        stats = self.get_stats()
        recent = self.store.get_render_history(RECENT_RENDERS_IN_REPORT)
        generated = (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")

        lines = [
            "",
            "Bar Chart Race - Render Report",
            "==============================",
            f"Generated: {generated}",
            "",
            "📊 Statistics",
            "-------------",
            f"Total Renders: {stats.total_renders}",
            f"Successful: {stats.successful_renders}",
            f"Failed: {stats.failed_renders}",
            f"Success Rate: {stats.success_rate:.1f}%",
            "",
            "💾 Storage",
            "----------",
            f"Total File Size: {format_file_size(stats.total_file_size)}",
            f"Total Render Time: {format_duration_ms(stats.total_render_time)}",
            f"Average Render Time: {format_duration_ms(stats.average_render_time)}",
            "",
            "🎨 Quality Breakdown",
            "--------------------",
        ]
        lines.extend(f"{quality}: {count}" for quality, count in stats.quality_breakdown.items())
        lines.extend(["", "📁 Format Breakdown", "-------------------"])
        lines.extend(f"{fmt.upper()}: {count}" for fmt, count in stats.format_breakdown.items())
        lines.extend(["", "🕐 Recent Renders", "-----------------"])
        for entry in recent:
            when = entry.timestamp[:19].replace("T", " ")
            mark = "✅" if entry.success else "❌"
            lines.append(
                f"{when} - {entry.composition_id} ({entry.format}, {entry.quality}) {mark}"
            )

        log_report_generated(len(recent))
        return "\n".join(lines) + "\n"

    def export_to_csv(self, file_path: Optional[str | Path] = None) -> Path:
        """Export the render history to a CSV file.

        Every cell is quoted and embedded quotes are doubled.

        Args:
            file_path: Destination (defaults to ``<output_dir>/render-history.csv``)

        Returns:
            Path of the written file

        Raises:
            RecordStoreError: If the file cannot be written
        """
        export_path = Path(file_path) if file_path else self.store.output_dir / EXPORT_FILENAME
        renders = list(self.store.load_metadata().renders)

        rows = [
            [
                _export_cell(value)
                for value in (
                    entry.id,
                    entry.timestamp,
                    entry.composition_id,
                    entry.format,
                    entry.quality,
                    entry.file_size,
                    entry.duration,
                    entry.render_time,
                    entry.success,
                    entry.error,
                )
            ]
            for entry in renders
        ]
        df = pd.DataFrame(rows, columns=EXPORT_COLUMNS, dtype=str)

        try:
            safe_write_dataframe(df, export_path, overwrite=True, quote_all=True)
        except FileHelperError as e:
            raise RecordStoreError(f"Failed to export render history: {e}") from e

        log_history_exported(str(export_path), len(rows))
        return export_path


def _as_number(value: Any) -> float:
    number = float(value)
    return int(number) if number.is_integer() else number
