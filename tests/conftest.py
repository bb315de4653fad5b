"""Shared fixtures for the toolkit tests."""

from __future__ import annotations

import itertools
from datetime import datetime, timezone
from pathlib import Path

import pytest

from render_ledger import RenderMetadata, RenderRecordStore
from utils import utc_now_iso

REFERENCE_NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def store(tmp_path: Path) -> RenderRecordStore:
    ledger_store = RenderRecordStore(output_dir=tmp_path / "output", lock_timeout=1.0)
    ledger_store.initialize("Test Project")
    return ledger_store


@pytest.fixture
def make_render():
    counter = itertools.count()

    def _make(
        timestamp: datetime = REFERENCE_NOW,
        success: bool = True,
        output_path: str | Path = "missing.mp4",
        **overrides,
    ) -> RenderMetadata:
        fields = {
            "id": f"render_test_{next(counter)}",
            "timestamp": utc_now_iso(timestamp),
            "composition_id": "intro",
            "output_path": str(output_path),
            "format": "mp4",
            "quality": "high",
            "file_size": 1000,
            "duration": 12.0,
            "render_time": 60000,
            "success": success,
            "error": None if success else "Render crashed",
        }
        fields.update(overrides)
        return RenderMetadata(**fields)

    return _make
