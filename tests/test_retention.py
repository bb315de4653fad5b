from __future__ import annotations

from dataclasses import replace
from datetime import timedelta
from pathlib import Path

import pytest
from conftest import REFERENCE_NOW

from render_ledger import RecordStoreError, RenderRecordStore, RetentionPolicy
from settings import RetentionOptions

OLD = REFERENCE_NOW - timedelta(days=60)
RECENT = REFERENCE_NOW - timedelta(days=2)


def _seed(store: RenderRecordStore, entries) -> None:
    with store.transaction() as metadata:
        for entry in reversed(entries):
            metadata.add_render(entry)


def _output_file(directory: Path, name: str, size: int = 10) -> Path:
    path = directory / name
    path.write_bytes(b"x" * size)
    return path


def test_keeps_newest_successful_and_drops_old_failures(store: RenderRecordStore, make_render) -> None:
    production = store.output_dir / "production"
    successes = [
        make_render(timestamp=OLD, output_path=_output_file(production, f"ok{i}.mp4"))
        for i in range(60)
    ]
    failures = [
        make_render(timestamp=OLD, success=False, output_path=_output_file(production, f"bad{i}.mp4"))
        for i in range(10)
    ]
    _seed(store, successes + failures)

    result = RetentionPolicy(store).cleanup(
        RetentionOptions(keep_days=30, keep_successful=50, delete_failed=True), now=REFERENCE_NOW
    )

    metadata = store.load_metadata()
    assert sum(1 for entry in metadata.renders if entry.success) == 50
    assert sum(1 for entry in metadata.renders if not entry.success) == 0
    assert result.files_deleted == 20
    assert result.entries_removed == 20
    assert result.space_freed == 200
    assert metadata.total_renders == 70
    assert [entry.id for entry in metadata.renders] == [entry.id for entry in successes[:50]]
    assert not (production / "ok55.mp4").exists()
    assert (production / "ok0.mp4").exists()


def test_recent_entries_are_always_kept(store: RenderRecordStore, make_render) -> None:
    _seed(store, [make_render(timestamp=RECENT, success=False) for _ in range(3)])

    result = RetentionPolicy(store).cleanup(
        RetentionOptions(keep_successful=0, delete_failed=True), now=REFERENCE_NOW
    )

    assert result.entries_removed == 0
    assert len(store.load_metadata().renders) == 3


def test_old_failures_kept_when_not_deleting_failed(store: RenderRecordStore, make_render) -> None:
    _seed(store, [make_render(timestamp=OLD, success=False) for _ in range(4)])

    result = RetentionPolicy(store).cleanup(
        RetentionOptions(delete_failed=False), now=REFERENCE_NOW
    )

    assert result.entries_removed == 0
    assert len(store.load_metadata().renders) == 4


def test_missing_files_are_not_errors(store: RenderRecordStore, make_render, tmp_path: Path) -> None:
    _seed(store, [make_render(timestamp=OLD, output_path=tmp_path / "gone.mp4") for _ in range(2)])

    result = RetentionPolicy(store).cleanup(
        RetentionOptions(keep_successful=0), now=REFERENCE_NOW
    )

    assert result.entries_removed == 2
    assert result.files_deleted == 0
    assert result.space_freed == 0
    assert len(store.load_metadata().renders) == 0


def test_unparseable_timestamp_counts_as_old(store: RenderRecordStore, make_render) -> None:
    broken = replace(make_render(), timestamp="not a date")
    _seed(store, [broken, make_render(timestamp=RECENT)])

    result = RetentionPolicy(store).cleanup(
        RetentionOptions(keep_successful=0), now=REFERENCE_NOW
    )

    assert result.entries_removed == 1
    remaining = store.load_metadata().renders
    assert [entry.timestamp for entry in remaining] != ["not a date"]
    assert len(remaining) == 1


def test_default_options(store: RenderRecordStore, make_render) -> None:
    _seed(store, [make_render(timestamp=OLD) for _ in range(3)])
    result = RetentionPolicy(store).cleanup(now=REFERENCE_NOW)
    assert result.entries_removed == 0


def test_cleanup_on_empty_ledger(store: RenderRecordStore) -> None:
    result = RetentionPolicy(store).cleanup(now=REFERENCE_NOW)
    assert (result.files_deleted, result.space_freed, result.entries_removed) == (0, 0, 0)


def test_files_survive_failed_ledger_write(
    store: RenderRecordStore, make_render, monkeypatch: pytest.MonkeyPatch
) -> None:
    output = _output_file(store.output_dir / "production", "old.mp4")
    _seed(store, [make_render(timestamp=OLD, output_path=output)])

    def failing_save(metadata) -> None:
        raise RecordStoreError("disk full")

    monkeypatch.setattr(store, "save_metadata", failing_save)
    with pytest.raises(RecordStoreError):
        RetentionPolicy(store).cleanup(RetentionOptions(keep_successful=0), now=REFERENCE_NOW)

    assert output.exists()
    assert len(store.load_metadata().renders) == 1
