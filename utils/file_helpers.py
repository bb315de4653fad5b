"""File helper utilities for the Bar Chart Race toolkit.

This module provides common file operations used across the application:
path validation, atomic JSON and CSV writes, timestamps, render ids and the
exclusive lock file that guards read-modify-write cycles on shared files.
"""

import csv
import json
import logging
import os
import tempfile
import time
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Optional

import pandas as pd

from .constants import SUPPORTED_CONFIG_FORMATS, SUPPORTED_DATASET_FORMATS

logger = logging.getLogger(__name__)


class PathValidationError(Exception):
    """Raised when path validation fails due to security concerns."""

    pass


class LockAcquisitionError(Exception):
    """Raised when an exclusive lock file cannot be acquired in time."""

    pass


def ensure_directory(path: Path) -> Path:
    """Ensure directory exists, creating it if necessary.

    Resolves path before operations to prevent symlink attacks.

    Args:
        path: Directory path to ensure

    Returns:
        Resolved Path object (for chaining)

    Raises:
        OSError: If directory creation fails
    """
    try:
        resolved_path = Path(path).resolve()
        resolved_path.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Directory ensured: {resolved_path}")
        return resolved_path
    except (OSError, RuntimeError) as e:
        logger.error(f"Failed to resolve or create directory {path}: {e}")
        raise


def get_file_extension(file_path: str | Path) -> str:
    """Get file extension from path.

    Args:
        file_path: File path

    Returns:
        File extension (without dot), empty string if no extension
    """
    path = Path(file_path)
    return path.suffix.lstrip(".").lower()


def is_supported_dataset_format(file_path: str | Path) -> bool:
    """Check if file is a supported dataset format."""
    return get_file_extension(file_path) in SUPPORTED_DATASET_FORMATS


def is_supported_config_format(file_path: str | Path) -> bool:
    """Check if file is a supported config format."""
    return get_file_extension(file_path) in SUPPORTED_CONFIG_FORMATS


def is_remote_source(source: str | Path) -> bool:
    """Return True when the source is an http(s) URL rather than a local path."""
    text = str(source).strip().lower()
    return text.startswith("http://") or text.startswith("https://")


def validate_path_safe(
    file_path: str | Path,
    must_exist: bool = False,
    must_be_file: bool = False,
    must_be_dir: bool = False,
) -> Path:
    """Validate path to prevent directory traversal attacks.

    Args:
        file_path: Path to validate
        must_exist: If True, path must exist
        must_be_file: If True, path must be a file
        must_be_dir: If True, path must be a directory

    Returns:
        Resolved Path object

    Raises:
        PathValidationError: If path contains traversal or violates constraints
        FileNotFoundError: If must_exist=True and path doesn't exist
    """
    path = Path(file_path).expanduser()

    if ".." in path.parts:
        raise PathValidationError(
            f"Path contains directory traversal sequence: {file_path}"
        )

    try:
        resolved = path.resolve()
    except (OSError, RuntimeError) as e:
        raise PathValidationError(f"Failed to resolve path {file_path}: {e}") from e

    if must_exist and not resolved.exists():
        raise FileNotFoundError(f"Path does not exist: {file_path}")

    if must_be_file and not resolved.is_file():
        if resolved.exists():
            raise PathValidationError(f"Path is not a file: {file_path}")
        else:
            raise FileNotFoundError(f"File does not exist: {file_path}")

    if must_be_dir and not resolved.is_dir():
        if resolved.exists():
            raise PathValidationError(f"Path is not a directory: {file_path}")
        else:
            raise FileNotFoundError(f"Directory does not exist: {file_path}")

    return resolved


def sanitize_path_component(component: str) -> str:
    """Sanitize a single path component.

    Removes or replaces characters that could be used for path injection.

    Args:
        component: Path component to sanitize

    Returns:
        Sanitized path component
    """
    sanitized = "".join(
        c
        for c in component
        if c.isprintable()
        and c not in ['\x00', '<', '>', ':', '"', '|', '?', '*', '/', '\\']
    )
    # Remove leading/trailing dots and spaces (Windows issue)
    sanitized = sanitized.strip('. ')
    sanitized = ' '.join(sanitized.split())
    return sanitized


def utc_now_iso(now: Optional[datetime] = None) -> str:
    """Return an ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso_timestamp(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Naive timestamps are read as UTC. Returns None when the value cannot be parsed.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def generate_render_id() -> str:
    """Generate a unique render ID.

    Returns:
        Render ID string (millisecond timestamp plus a random suffix)
    """
    millis = int(time.time() * 1000)
    return f"render_{millis}_{uuid.uuid4().hex[:9]}"


@contextmanager
def exclusive_lock(
    lock_path: Path,
    timeout: float = 10.0,
    poll_interval: float = 0.05,
    stale_after: Optional[float] = 300.0,
) -> Iterator[Path]:
    """Hold an exclusive lock file for the duration of the block.

    The lock file is created with O_CREAT | O_EXCL, so only one holder can exist
    across processes. Each holder writes a unique token into the file and only
    removes the file on release if it still carries that token.

    A lock file older than ``stale_after`` seconds is treated as abandoned. It is
    broken by renaming it aside, which only one contender can do; a contender
    whose rename caught a fresh lock puts it back and keeps waiting.

    Args:
        lock_path: Path of the lock file
        timeout: Maximum time to wait for the lock in seconds
        poll_interval: Delay between acquisition attempts in seconds
        stale_after: Age in seconds after which an existing lock is broken
            (None disables stale lock detection)

    Yields:
        The lock file path

    Raises:
        LockAcquisitionError: If the lock is not acquired within ``timeout``
    """
    lock_path = Path(lock_path)
    token = f"{os.getpid()} {uuid.uuid4().hex}"
    deadline = time.monotonic() + timeout

    while True:
        try:
            fd = os.open(str(lock_path), os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError:
            if (
                stale_after is not None
                and _is_stale(lock_path, stale_after)
                and _break_stale_lock(lock_path, stale_after)
            ):
                continue
            if time.monotonic() >= deadline:
                raise LockAcquisitionError(
                    f"Timed out after {timeout}s waiting for lock: {lock_path}"
                )
            time.sleep(poll_interval)
            continue
        except OSError as e:
            raise LockAcquisitionError(f"Failed to create lock file {lock_path}: {e}") from e
        break

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(f"{token}\n")
        logger.debug(f"Lock acquired: {lock_path}")
        yield lock_path
    finally:
        _release_lock(lock_path, token)


def _is_stale(lock_path: Path, stale_after: float) -> bool:
    try:
        age = time.time() - lock_path.stat().st_mtime
    except FileNotFoundError:
        # Released between our open attempt and the stat; retry immediately
        return False
    return age > stale_after


def _break_stale_lock(lock_path: Path, stale_after: float) -> bool:
    """Move a stale lock file out of the way.

    Returns True only when the file that was moved is itself stale.
    """
    aside = lock_path.with_name(f"{lock_path.name}.stale-{uuid.uuid4().hex}")
    try:
        os.rename(lock_path, aside)
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning(f"Failed to break stale lock file {lock_path}: {e}")
        return False

    if _is_stale(aside, stale_after):
        logger.warning(f"Broke stale lock file: {lock_path}")
        _remove_quietly(aside)
        return True

    # Another contender replaced the stale lock before our rename
    try:
        os.link(aside, lock_path)
    except FileExistsError:
        logger.warning(f"Lock file {lock_path} was taken while restoring a fresh lock")
    except OSError as e:
        logger.warning(f"Failed to restore lock file {lock_path}: {e}")
    _remove_quietly(aside)
    return False


def _release_lock(lock_path: Path, token: str) -> None:
    try:
        holder = lock_path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        logger.warning(f"Lock file already gone on release: {lock_path}")
        return
    except OSError as e:
        logger.warning(f"Failed to read lock file {lock_path} on release: {e}")
        return

    if holder != token:
        logger.warning(f"Lock file {lock_path} is held by another process, leaving it")
        return
    _remove_quietly(lock_path)
    logger.debug(f"Lock released: {lock_path}")


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


class FileHelperError(Exception):
    """Raised when file operations fail."""

    pass


def safe_write_json(data: Any, file_path: Path, overwrite: bool = True) -> None:
    """Write JSON data to file atomically.

    The document is serialized to a temporary file in the target directory and
    moved into place with ``os.replace``, so readers see either the previous
    document or the new one, never a partial write.

    Args:
        data: Data to serialize to JSON
        file_path: Path to write file
        overwrite: If False, raise error if the file exists

    Raises:
        FileHelperError: If write fails or file exists and overwrite=False
    """
    try:
        resolved_path = Path(file_path).resolve()
    except (OSError, RuntimeError) as e:
        raise FileHelperError(f"Failed to resolve path {file_path}: {e}") from e

    if resolved_path.exists() and not overwrite:
        raise FileHelperError(f"File already exists: {resolved_path} (use overwrite=True to replace)")

    try:
        payload = json.dumps(data, indent=2, ensure_ascii=False, default=str)
    except (TypeError, ValueError) as e:
        raise FileHelperError(f"Failed to serialize data to JSON for {resolved_path}: {e}") from e

    temp_path = None
    try:
        ensure_directory(resolved_path.parent)
        fd, temp_path = tempfile.mkstemp(
            prefix=f".{resolved_path.name}-", suffix=".tmp", dir=resolved_path.parent
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
            f.write("\n")
        os.replace(temp_path, resolved_path)
        temp_path = None
        logger.debug(f"JSON written to: {resolved_path}")
    except OSError as e:
        raise FileHelperError(f"Failed to write JSON to {resolved_path}: I/O error: {e}") from e
    finally:
        if temp_path is not None and os.path.exists(temp_path):
            os.unlink(temp_path)


def safe_read_json(file_path: Path) -> Any:
    """Read JSON from file.

    Args:
        file_path: Path to read file

    Returns:
        Parsed JSON data

    Raises:
        FileNotFoundError: If the file doesn't exist
        FileHelperError: If the file cannot be read or parsed
    """
    resolved_path = Path(file_path).resolve()
    if not resolved_path.exists():
        raise FileNotFoundError(f"File does not exist: {resolved_path}")

    try:
        with open(resolved_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        logger.debug(f"JSON read from: {resolved_path}")
        return data
    except json.JSONDecodeError as e:
        raise FileHelperError(f"Failed to parse JSON from {resolved_path}: Invalid JSON syntax: {e}") from e
    except UnicodeDecodeError as e:
        raise FileHelperError(f"Failed to read JSON from {resolved_path}: Encoding error: {e}") from e
    except OSError as e:
        raise FileHelperError(f"Failed to read JSON from {resolved_path}: I/O error: {e}") from e


def safe_write_dataframe(
    df: pd.DataFrame, file_path: Path, overwrite: bool = True, quote_all: bool = False
) -> None:
    """Write a DataFrame to a CSV file.

    Args:
        df: DataFrame to write
        file_path: Path to write file
        overwrite: If False, raise error if the file exists
        quote_all: If True, quote every cell (embedded quotes are doubled)

    Raises:
        FileHelperError: If write fails or file exists and overwrite=False
    """
    try:
        resolved_path = Path(file_path).resolve()
    except (OSError, RuntimeError) as e:
        raise FileHelperError(f"Failed to resolve path {file_path}: {e}") from e

    if resolved_path.exists() and not overwrite:
        raise FileHelperError(f"File already exists: {resolved_path} (use overwrite=True to replace)")

    try:
        ensure_directory(resolved_path.parent)
        df.to_csv(
            resolved_path,
            index=False,
            quoting=csv.QUOTE_ALL if quote_all else csv.QUOTE_MINIMAL,
            lineterminator="\n",
            encoding="utf-8",
        )
        logger.debug(f"DataFrame written to: {resolved_path} (csv)")
    except OSError as e:
        raise FileHelperError(f"Failed to write DataFrame to {resolved_path}: I/O error: {e}") from e
