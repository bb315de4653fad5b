"""Persistence layer for the render ledger.

This module owns the single JSON document that records every render attempt for
an output directory. Every mutation is a full read-modify-write performed while
holding an exclusive lock file, and every write is an atomic file replacement.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from utils import (
    FileHelperError,
    LockAcquisitionError,
    ensure_directory,
    exclusive_lock,
    generate_render_id,
    get_logger,
    safe_read_json,
    safe_write_json,
    sanitize_path_component,
    utc_now_iso,
)
from utils.constants import APP_NAME, DEFAULT_OUTPUT_DIR

from .schemas import ProjectMetadata, RenderConfig, RenderMetadata, RenderOutcome
from .utils.constants import (
    DEFAULT_MAX_HISTORY,
    LEDGER_FILENAME,
    LOCK_SUFFIX,
    OUTPUT_SUBDIRECTORIES,
    RENDER_CATEGORIES,
)
from .utils.logging import log_render_recorded

logger = get_logger(__name__)


class RecordStoreError(Exception):
    """Raised when the ledger cannot be written."""

    pass


class LedgerCorruptionError(Exception):
    """Raised when the ledger file exists but is not a valid ledger document."""

    pass


class LedgerLockError(RecordStoreError):
    """Raised when the ledger lock cannot be acquired."""

    pass


class RenderRecordStore:
    """Durable ledger of render attempts for one output directory.

    This class:
    - Creates the output directory layout and the ledger file
    - Records render outcomes, newest first, in a bounded history
    - Loads the ledger fail-soft (missing or corrupt means "no history")
    - Serializes read-modify-write cycles with a lock file
    """

    def __init__(
        self,
        output_dir: str | Path = DEFAULT_OUTPUT_DIR,
        max_history: int = DEFAULT_MAX_HISTORY,
        lock_timeout: float = 10.0,
        stale_lock_seconds: Optional[float] = 300.0,
        project_name: str = APP_NAME,
    ):
        """Initialize the record store.

        Args:
            output_dir: Base directory for render outputs and the ledger
            max_history: Maximum number of entries kept in the ledger
            lock_timeout: Seconds to wait for the ledger lock
            stale_lock_seconds: Age after which a leftover lock is broken
            project_name: Project name used when a fresh ledger is created
        """
        self.output_dir = Path(output_dir).expanduser().resolve()
        self.metadata_path = self.output_dir / LEDGER_FILENAME
        self.lock_path = self.output_dir / (LEDGER_FILENAME + LOCK_SUFFIX)
        self.max_history = max_history
        self.lock_timeout = lock_timeout
        self.stale_lock_seconds = stale_lock_seconds
        self.project_name = project_name
        logger.debug(f"RenderRecordStore initialized: {self.metadata_path}")

    @classmethod
    def from_settings(cls, settings) -> "RenderRecordStore":
        """Create a store from validated ToolkitSettings."""
        return cls(
            output_dir=settings.output_dir,
            max_history=settings.max_history,
            lock_timeout=settings.lock_timeout,
            stale_lock_seconds=settings.stale_lock_seconds,
            project_name=settings.project_name,
        )

    def initialize(self, project_name: Optional[str] = None) -> None:
        """Create the output directory layout and the ledger if absent.

        Safe to call on every run: an existing ledger is never reset.

        Args:
            project_name: Project name for a newly created ledger

        Raises:
            RecordStoreError: If directories or the ledger cannot be created
        """
        if project_name:
            self.project_name = project_name

        try:
            ensure_directory(self.output_dir)
            for subdir in OUTPUT_SUBDIRECTORIES:
                ensure_directory(self.output_dir / subdir)
        except OSError as e:
            raise RecordStoreError(f"Failed to create output directories in {self.output_dir}: {e}") from e

        with self._locked():
            if self.metadata_path.exists():
                logger.debug(f"Ledger already exists: {self.metadata_path}")
                return
            self.save_metadata(ProjectMetadata.new(self.project_name, self.max_history))
            logger.info(f"Ledger created: {self.metadata_path}")

    def load_metadata(self) -> ProjectMetadata:
        """Load the ledger.

        A missing or corrupt ledger yields a fresh in-memory ledger; the file on
        disk is left untouched until the next successful write.

        Returns:
            ProjectMetadata (a transient copy of the ledger)
        """
        try:
            return self._read_ledger()
        except FileNotFoundError:
            logger.debug(f"No ledger at {self.metadata_path}, starting empty")
        except LedgerCorruptionError as e:
            logger.warning(f"Ignoring unreadable ledger, starting empty: {e}")
        return ProjectMetadata.new(self.project_name, self.max_history)

    def save_metadata(self, metadata: ProjectMetadata) -> None:
        """Write the ledger atomically.

        Raises:
            RecordStoreError: If the write fails
        """
        try:
            safe_write_json(metadata.to_dict(), self.metadata_path, overwrite=True)
        except FileHelperError as e:
            raise RecordStoreError(f"Failed to save ledger: {e}") from e

    @contextmanager
    def transaction(self) -> Iterator[ProjectMetadata]:
        """Lock, load and yield the ledger, then save it if the block succeeds.

        The lock is released on every exit path; an exception inside the block
        discards the changes.

        Raises:
            LedgerLockError: If the lock cannot be acquired in time
            RecordStoreError: If the ledger cannot be written
        """
        with self._locked():
            metadata = self.load_metadata()
            yield metadata
            self.save_metadata(metadata)

    def record_render(
        self,
        config: RenderConfig,
        outcome: RenderOutcome,
        render_time: float,
    ) -> RenderMetadata:
        """Record a render outcome as the newest ledger entry.

        Negative sizes, durations and render times are stored as 0 so the
        entry always reads back.

        Args:
            config: Render configuration
            outcome: Outcome reported by the rendering engine
            render_time: Wall-clock render time in milliseconds

        Returns:
            The recorded RenderMetadata
        """
        entry = RenderMetadata(
            id=generate_render_id(),
            timestamp=utc_now_iso(),
            composition_id=config.composition_id,
            output_path=outcome.output_path or config.output_path,
            format=config.format.value,
            quality=config.quality.value,
            file_size=max(outcome.file_size or 0, 0),
            duration=max(outcome.duration or 0, 0),
            render_time=max(render_time, 0),
            success=outcome.success,
            error=None if outcome.success else (outcome.error or "Unknown error"),
            props=dict(config.props) if config.props is not None else None,
        )

        with self.transaction() as metadata:
            metadata.add_render(entry)

        log_render_recorded(entry.id, entry.composition_id, entry.success)
        return entry

    def get_render_history(self, limit: int = 10) -> list[RenderMetadata]:
        """Return the newest ``limit`` ledger entries."""
        renders = self.load_metadata().renders
        return list(renders)[: max(limit, 0)]

    def get_suggested_path(
        self,
        composition_id: str,
        format: str,
        quality: str,
        category: str = "production",
    ) -> Path:
        """Suggest an output path for a new render.

        The path is ``{output_dir}/{category}/{composition_id}_{quality}_{timestamp}.{format}``
        with a filesystem-safe timestamp truncated to seconds.

        Raises:
            ValueError: If the category is unknown
        """
        if category not in RENDER_CATEGORIES:
            raise ValueError(
                f"Unknown render category: {category}. Expected one of {', '.join(RENDER_CATEGORIES)}"
            )
        format_value = getattr(format, "value", format)
        quality_value = getattr(quality, "value", quality)
        timestamp = utc_now_iso().replace(":", "-").replace(".", "-")[:19]
        filename = f"{sanitize_path_component(composition_id)}_{quality_value}_{timestamp}.{format_value}"
        return self.output_dir / category / filename

    def _read_ledger(self) -> ProjectMetadata:
        try:
            data = safe_read_json(self.metadata_path)
        except FileHelperError as e:
            raise LedgerCorruptionError(str(e)) from e
        try:
            return ProjectMetadata.from_dict(data, max_history=self.max_history)
        except ValueError as e:
            raise LedgerCorruptionError(f"Invalid ledger document {self.metadata_path}: {e}") from e

    @contextmanager
    def _locked(self) -> Iterator[None]:
        try:
            ensure_directory(self.output_dir)
            with exclusive_lock(
                self.lock_path,
                timeout=self.lock_timeout,
                stale_after=self.stale_lock_seconds,
            ):
                yield
        except LockAcquisitionError as e:
            raise LedgerLockError(f"Ledger is busy: {e}") from e
