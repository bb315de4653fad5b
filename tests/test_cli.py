from __future__ import annotations

import json
from pathlib import Path

import cli


def _run(output_dir: Path, *args: str) -> int:
    return cli.main(["--output-dir", str(output_dir), *args])


def test_init_record_history(tmp_path: Path, capsys) -> None:
    output_dir = tmp_path / "output"

    assert _run(output_dir, "init", "--project-name", "Demo") == 0
    assert (output_dir / ".metadata.json").exists()

    assert _run(output_dir, "record", "--composition", "intro", "--output-path", "intro.mp4",
                "--file-size", "2048", "--render-time", "1200") == 0
    assert _run(output_dir, "record", "--composition", "outro", "--output-path", "outro.webm",
                "--format", "webm", "--failed", "--error", "crash") == 0

    capsys.readouterr()
    assert _run(output_dir, "history", "--limit", "5") == 0
    out = capsys.readouterr().out
    assert "outro (webm, high)" in out
    assert "intro (mp4, high)" in out

    ledger = json.loads((output_dir / ".metadata.json").read_text(encoding="utf-8"))
    assert ledger["projectName"] == "Demo"
    assert ledger["totalRenders"] == 2


def test_stats_report_export_cleanup(tmp_path: Path, capsys) -> None:
    output_dir = tmp_path / "output"
    _run(output_dir, "init")
    _run(output_dir, "record", "--composition", "intro", "--output-path", "intro.mp4")

    assert _run(output_dir, "stats") == 0
    assert '"successful_renders": 1' in capsys.readouterr().out

    assert _run(output_dir, "report") == 0
    assert "📊 Statistics" in capsys.readouterr().out

    assert _run(output_dir, "export") == 0
    assert (output_dir / "render-history.csv").exists()

    assert _run(output_dir, "cleanup", "--keep-days", "0", "--keep-successful", "1") == 0
    assert "Removed 0 entries" in capsys.readouterr().out


def test_suggest_path(tmp_path: Path, capsys) -> None:
    assert _run(tmp_path, "suggest-path", "--composition", "intro", "--category", "draft") == 0
    out = capsys.readouterr().out.strip().splitlines()[-1]
    assert Path(out).parent == tmp_path.resolve() / "draft"
    assert Path(out).name.startswith("intro_high_")


def test_analyze_file(tmp_path: Path, capsys) -> None:
    data = tmp_path / "platforms.csv"
    data.write_text("Date,YouTube,Netflix\n2020-01,2000,1500\n", encoding="utf-8")

    assert _run(tmp_path, "analyze", str(data)) == 0
    out = capsys.readouterr().out
    assert '"dateColumn": "Date"' in out
    assert '"estimatedDateFormat": "YYYY-MM"' in out


def test_analyze_missing_file_is_input_error(tmp_path: Path) -> None:
    assert _run(tmp_path, "analyze", str(tmp_path / "missing.csv")) == 2


def test_analyze_empty_file_is_input_error(tmp_path: Path) -> None:
    data = tmp_path / "empty.csv"
    data.write_text("\n", encoding="utf-8")
    assert _run(tmp_path, "analyze", str(data)) == 2


def test_scan_writes_manifest(tmp_path: Path) -> None:
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "a.csv").write_text("Date,A\n2020,1\n", encoding="utf-8")
    manifest = tmp_path / "manifest.json"

    assert _run(tmp_path, "scan", str(data_dir), "--manifest", str(manifest)) == 0
    assert json.loads(manifest.read_text(encoding="utf-8"))["validFiles"] == 1


def test_invalid_config_exit_code(tmp_path: Path) -> None:
    config = tmp_path / "toolkit.yaml"
    config.write_text("max_history: 0\n", encoding="utf-8")
    assert cli.main(["--config", str(config), "history"]) == 1
