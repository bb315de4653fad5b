from __future__ import annotations

import csv
from datetime import datetime, timezone
from pathlib import Path

import pytest

from render_ledger import RenderRecordStore, StatsReporter, format_duration_ms, format_file_size

MAY_FIRST = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def seeded_store(store: RenderRecordStore, make_render) -> RenderRecordStore:
    entries = [
        make_render(timestamp=MAY_FIRST, file_size=1000, render_time=60000),
        make_render(
            timestamp=MAY_FIRST,
            success=False,
            format="webm",
            quality="low",
            file_size=500,
            render_time=30000,
        ),
        make_render(timestamp=MAY_FIRST, composition_id="outro", file_size=2000, render_time=90000),
    ]
    with store.transaction() as metadata:
        for entry in reversed(entries):
            metadata.add_render(entry)
    return store


def test_empty_ledger_stats(store: RenderRecordStore) -> None:
    stats = StatsReporter(store).get_stats()

    assert stats.total_renders == 0
    assert stats.successful_renders == 0
    assert stats.average_render_time == 0
    assert stats.success_rate == 0
    assert stats.quality_breakdown == {}


def test_stats(seeded_store: RenderRecordStore) -> None:
    stats = StatsReporter(seeded_store).get_stats()

    assert stats.total_renders == 3
    assert stats.successful_renders == 2
    assert stats.failed_renders == 1
    assert stats.total_file_size == 3000
    assert stats.total_render_time == 180000
    assert stats.average_render_time == 60000
    assert stats.success_rate == pytest.approx(200 / 3)
    assert list(stats.quality_breakdown.items()) == [("high", 2), ("low", 1)]
    assert list(stats.format_breakdown.items()) == [("mp4", 2), ("webm", 1)]


def test_total_renders_is_all_time(seeded_store: RenderRecordStore) -> None:
    with seeded_store.transaction() as metadata:
        metadata.replace_renders(list(metadata.renders)[:1])

    stats = StatsReporter(seeded_store).get_stats()
    assert stats.total_renders == 3
    assert stats.successful_renders == 1
    assert stats.success_rate == 100


def test_report(seeded_store: RenderRecordStore) -> None:
    report = StatsReporter(seeded_store).generate_report(now=datetime(2024, 6, 1, 8, 0, 0))

    assert "Bar Chart Race - Render Report" in report
    assert "Generated: 2024-06-01 08:00:00" in report
    assert "Total Renders: 3" in report
    assert "Success Rate: 66.7%" in report
    assert "Total File Size: 2.9 KB" in report
    assert "Total Render Time: 3m 0s" in report
    assert "Average Render Time: 1m 0s" in report
    assert "high: 2\nlow: 1" in report
    assert "MP4: 2\nWEBM: 1" in report
    assert "2024-05-01 12:00:00 - intro (mp4, high) ✅" in report
    assert "2024-05-01 12:00:00 - intro (webm, low) ❌" in report


def test_report_on_empty_ledger(store: RenderRecordStore) -> None:
    report = StatsReporter(store).generate_report()
    assert "Success Rate: 0.0%" in report
    assert "Total File Size: 0.0 B" in report


def test_export_quotes_every_cell(seeded_store: RenderRecordStore) -> None:
    path = StatsReporter(seeded_store).export_to_csv()

    assert path == seeded_store.output_dir / "render-history.csv"
    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == (
        '"ID","Timestamp","Composition","Format","Quality",'
        '"File Size","Duration","Render Time","Success","Error"'
    )
    assert len(lines) == 4
    assert lines[1].endswith('"1000","12","60000","true",""')
    assert lines[2].endswith('"500","12","30000","false","Render crashed"')


def test_export_doubles_embedded_quotes(store: RenderRecordStore, make_render, tmp_path: Path) -> None:
    with store.transaction() as metadata:
        metadata.add_render(
            make_render(success=False, composition_id="intro, v2", error='Codec "vp9" failed')
        )

    path = StatsReporter(store).export_to_csv(tmp_path / "exports" / "history.csv")

    text = path.read_text(encoding="utf-8")
    assert '"Codec ""vp9"" failed"' in text
    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[1][2] == "intro, v2"
    assert rows[1][9] == 'Codec "vp9" failed'


def test_export_empty_ledger(store: RenderRecordStore) -> None:
    path = StatsReporter(store).export_to_csv()
    assert len(path.read_text(encoding="utf-8").splitlines()) == 1


@pytest.mark.parametrize(
    ("size", "expected"),
    [(0, "0.0 B"), (512, "512.0 B"), (1536, "1.5 KB"), (5 * 1024**2, "5.0 MB"), (1024**4, "1024.0 GB")],
)
def test_format_file_size(size: int, expected: str) -> None:
    assert format_file_size(size) == expected


def test_format_duration_ms() -> None:
    assert format_duration_ms(0) == "0m 0s"
    assert format_duration_ms(125000) == "2m 5s"
    assert format_duration_ms(59999) == "0m 59s"
