"""CSV manifest generation.

A manifest is a JSON snapshot of every analyzed CSV file in a data directory,
consumed by the rendering layer so it does not have to re-analyze files.
"""

from pathlib import Path
from typing import Any, Optional

from utils import FileHelperError, get_logger, safe_write_json, utc_now_iso

from .metadata import DataLoadResult

logger = get_logger(__name__)


class ManifestError(Exception):
    """Raised when a manifest cannot be written."""

    pass


def build_manifest(result: DataLoadResult, generated: Optional[str] = None) -> dict[str, Any]:
    """Convert a load result to the manifest document.

    Args:
        result: Result of a CSV scan
        generated: Generation timestamp (defaults to now, ISO-8601 UTC)

    Returns:
        Manifest dictionary
    """
    return {
        "generated": generated or utc_now_iso(),
        "csvFiles": [metadata.to_dict() for metadata in result.csv_files],
        "totalFiles": result.total_files,
        "validFiles": result.valid_files,
        "errors": list(result.errors),
    }


def write_manifest(result: DataLoadResult, output_path: Path) -> Path:
    """Write the manifest for a load result to disk.

    Raises:
        ManifestError: If the manifest cannot be written
    """
    output_path = Path(output_path)
    try:
        safe_write_json(build_manifest(result), output_path, overwrite=True)
    except FileHelperError as e:
        raise ManifestError(f"Failed to write CSV manifest: {e}") from e

    logger.info(
        f"Generated manifest: {output_path} "
        f"({result.valid_files}/{result.total_files} files processed)"
    )
    if result.errors:
        logger.warning(f"Manifest has {len(result.errors)} errors")
    return output_path
