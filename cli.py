"""Command-line interface for the Bar Chart Race toolkit.

This module provides the CLI entry point for the toolkit.
It handles argument parsing, settings loading and dispatch to the CSV
ingestion and render ledger components.
"""

import argparse
import json
import sys
from pathlib import Path

from pydantic import ValidationError

from ingestion import (
    CSVDataLoader,
    CSVInputError,
    CSVLoadError,
    ManifestError,
    write_manifest,
)
from render_ledger import (
    LedgerLockError,
    OutputFormat,
    RecordStoreError,
    RenderConfig,
    RenderOutcome,
    RenderQuality,
    RenderRecordStore,
    RetentionPolicy,
    StatsReporter,
)
from render_ledger.utils.constants import RENDER_CATEGORIES
from settings import RetentionOptions, SettingsError, load_settings
from utils import (
    APP_NAME,
    APP_VERSION,
    EXIT_INPUT_ERROR,
    EXIT_INVALID_CONFIG,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    get_logger,
    setup_logging,
)

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="barchart-race",
        description=f"{APP_NAME} - CSV analysis and render history tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a YAML or JSON settings file",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Render output directory (overrides the settings file)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(
        dest="command", help="Command to execute", required=True
    )

    # 'analyze' command
    analyze_parser = subparsers.add_parser(
        "analyze", help="Analyze one CSV file or URL and print its metadata"
    )
    analyze_parser.add_argument("source", help="CSV file path or http(s) URL")
    analyze_parser.add_argument("--name", default=None, help="Display name for the source")

    # 'scan' command
    scan_parser = subparsers.add_parser(
        "scan", help="Analyze every CSV file in a directory"
    )
    scan_parser.add_argument("data_dir", help="Directory containing CSV files")
    scan_parser.add_argument(
        "--manifest",
        default=None,
        help="Write the results to this manifest JSON file",
    )

    # 'init' command
    init_parser = subparsers.add_parser(
        "init", help="Create the output directory layout and render ledger"
    )
    init_parser.add_argument("--project-name", default=None, help="Project name for a new ledger")

    # 'record' command
    record_parser = subparsers.add_parser("record", help="Record a render outcome")
    record_parser.add_argument("--composition", required=True, help="Composition id")
    record_parser.add_argument("--output-path", required=True, help="Rendered file path")
    record_parser.add_argument(
        "--format", choices=[f.value for f in OutputFormat], default=OutputFormat.MP4.value
    )
    record_parser.add_argument(
        "--quality", choices=[q.value for q in RenderQuality], default=RenderQuality.HIGH.value
    )
    record_parser.add_argument(
        "--failed", action="store_true", help="Record the render as failed"
    )
    record_parser.add_argument("--error", default=None, help="Error message of a failed render")
    record_parser.add_argument("--duration", type=float, default=0, help="Video duration in seconds")
    record_parser.add_argument("--file-size", type=int, default=0, help="Output size in bytes")
    record_parser.add_argument(
        "--render-time", type=float, default=0, help="Render time in milliseconds"
    )

    # 'history' command
    history_parser = subparsers.add_parser("history", help="Show recent renders")
    history_parser.add_argument("--limit", type=int, default=10, help="Number of entries to show")

    # 'stats' command
    subparsers.add_parser("stats", help="Print render statistics as JSON")

    # 'report' command
    subparsers.add_parser("report", help="Print the render report")

    # 'cleanup' command
    cleanup_parser = subparsers.add_parser(
        "cleanup", help="Remove old renders from the ledger and disk"
    )
    cleanup_parser.add_argument("--keep-days", type=float, default=None)
    cleanup_parser.add_argument("--keep-successful", type=int, default=None)
    cleanup_parser.add_argument(
        "--keep-failed",
        action="store_true",
        help="Keep failed renders regardless of age",
    )

    # 'export' command
    export_parser = subparsers.add_parser("export", help="Export the render history as CSV")
    export_parser.add_argument("--output", default=None, help="Destination CSV path")

    # 'suggest-path' command
    suggest_parser = subparsers.add_parser(
        "suggest-path", help="Suggest an output path for a new render"
    )
    suggest_parser.add_argument("--composition", required=True, help="Composition id")
    suggest_parser.add_argument(
        "--format", choices=[f.value for f in OutputFormat], default=OutputFormat.MP4.value
    )
    suggest_parser.add_argument(
        "--quality", choices=[q.value for q in RenderQuality], default=RenderQuality.HIGH.value
    )
    suggest_parser.add_argument(
        "--category", choices=list(RENDER_CATEGORIES), default="production"
    )

    return parser


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    return build_parser().parse_args(argv)


def cmd_analyze(args, settings) -> int:
    loader = CSVDataLoader(fetch_timeout=settings.fetch_timeout)
    metadata = loader.analyze_source(args.source, filename=args.name)
    print(json.dumps(metadata.to_dict(), indent=2, ensure_ascii=False))
    if metadata.synthetic:
        print("ℹ Source could not be fetched; metadata is synthetic", file=sys.stderr)
    elif metadata.needs_confirmation:
        print(
            f"ℹ Date column {metadata.date_column!r} was guessed; please confirm",
            file=sys.stderr,
        )
    return EXIT_SUCCESS


def cmd_scan(args, settings) -> int:
    loader = CSVDataLoader(fetch_timeout=settings.fetch_timeout)
    result = loader.scan_directory(args.data_dir)
    for metadata in result.csv_files:
        print(
            f"✓ {metadata.filename}: {metadata.row_count} rows, "
            f"date column={metadata.date_column}, {len(metadata.value_columns)} value columns"
        )
    for error in result.errors:
        print(f"✗ {error}", file=sys.stderr)

    if args.manifest:
        write_manifest(result, Path(args.manifest))
        print(f"✓ Manifest written to {args.manifest}")

    print(f"{result.valid_files}/{result.total_files} files analyzed")
    return EXIT_SUCCESS if result.valid_files == result.total_files and not result.errors else EXIT_INPUT_ERROR


def cmd_init(args, store: RenderRecordStore) -> int:
    store.initialize(args.project_name)
    print(f"✓ Output directory ready: {store.output_dir}")
    return EXIT_SUCCESS


def cmd_record(args, store: RenderRecordStore) -> int:
    config = RenderConfig(
        composition_id=args.composition,
        output_path=args.output_path,
        format=args.format,
        quality=args.quality,
    )
    outcome = RenderOutcome(
        success=not args.failed,
        output_path=args.output_path,
        duration=args.duration,
        file_size=args.file_size,
        error=args.error,
    )
    entry = store.record_render(config, outcome, args.render_time)
    print(f"✓ Recorded {entry.id}")
    return EXIT_SUCCESS


def cmd_history(args, store: RenderRecordStore) -> int:
    history = store.get_render_history(args.limit)
    if not history:
        print("No renders recorded")
    for entry in history:
        mark = "✓" if entry.success else "✗"
        print(
            f"{mark} {entry.timestamp} {entry.composition_id} "
            f"({entry.format}, {entry.quality}) -> {entry.output_path}"
        )
    return EXIT_SUCCESS


def cmd_stats(args, store: RenderRecordStore) -> int:
    stats = StatsReporter(store).get_stats()
    print(json.dumps(stats.__dict__, indent=2, ensure_ascii=False))
    return EXIT_SUCCESS


def cmd_report(args, store: RenderRecordStore) -> int:
    print(StatsReporter(store).generate_report())
    return EXIT_SUCCESS


def cmd_cleanup(args, store: RenderRecordStore, settings) -> int:
    updates = {
        "keep_days": args.keep_days,
        "keep_successful": args.keep_successful,
        "delete_failed": False if args.keep_failed else None,
    }
    options = RetentionOptions(
        **{
            **settings.retention.model_dump(),
            **{key: value for key, value in updates.items() if value is not None},
        }
    )
    result = RetentionPolicy(store).cleanup(options)
    print(
        f"✓ Removed {result.entries_removed} entries, deleted {result.files_deleted} files, "
        f"freed {result.space_freed} bytes"
    )
    return EXIT_SUCCESS


def cmd_export(args, store: RenderRecordStore) -> int:
    path = StatsReporter(store).export_to_csv(args.output)
    print(f"✓ Render history exported to {path}")
    return EXIT_SUCCESS


def cmd_suggest_path(args, store: RenderRecordStore) -> int:
    print(store.get_suggested_path(args.composition, args.format, args.quality, args.category))
    return EXIT_SUCCESS


def run_command(args: argparse.Namespace) -> int:
    """Load settings and dispatch a parsed command.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    try:
        settings = load_settings(args.config, overrides={"output_dir": args.output_dir})
    except SettingsError as e:
        print(f"✗ Invalid configuration:\n{e}", file=sys.stderr)
        return EXIT_INVALID_CONFIG

    if args.command == "analyze":
        return cmd_analyze(args, settings)
    if args.command == "scan":
        return cmd_scan(args, settings)

    store = RenderRecordStore.from_settings(settings)
    ledger_commands = {
        "init": cmd_init,
        "record": cmd_record,
        "history": cmd_history,
        "stats": cmd_stats,
        "report": cmd_report,
        "export": cmd_export,
        "suggest-path": cmd_suggest_path,
    }
    if args.command == "cleanup":
        return cmd_cleanup(args, store, settings)
    if args.command in ledger_commands:
        return ledger_commands[args.command](args, store)

    print(f"Unknown command: {args.command}", file=sys.stderr)
    return EXIT_RUNTIME_ERROR


def main(argv=None) -> int:
    """Main entry point for the CLI.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    args = parse_args(argv)

    # Setup logging
    setup_logging(verbose=args.verbose)

    try:
        return run_command(args)
    except (CSVInputError, CSVLoadError) as e:
        print(f"✗ Invalid input: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    except ValidationError as e:
        print(f"✗ Invalid render configuration:\n{e}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    except LedgerLockError as e:
        print(f"✗ {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except (RecordStoreError, ManifestError) as e:
        print(f"✗ Runtime error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except KeyboardInterrupt:
        print("\n✗ Interrupted by user", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        print(f"✗ Runtime error: {e}", file=sys.stderr)
        logger.exception("Unexpected error during command execution")
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
