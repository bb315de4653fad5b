"""Retention policy for the render ledger.

This module prunes old ledger entries and deletes the output files they point to.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from settings import RetentionOptions
from utils import get_logger, parse_iso_timestamp

from .schemas import RenderMetadata
from .store import RenderRecordStore
from .utils.logging import log_cleanup_completed

logger = get_logger(__name__)


@dataclass
class CleanupResult:
    """Outcome of one retention pass."""

    files_deleted: int = 0
    space_freed: int = 0
    entries_removed: int = 0


class RetentionPolicy:
    """Applies retention rules to a RenderRecordStore.

    An entry is kept when any of these holds:
    - it is newer than ``keep_days``
    - it succeeded and fewer than ``keep_successful`` successful entries have
      been kept so far (counting newest first)
    - it failed and ``delete_failed`` is off

    Everything else is removed from the ledger together with its output file.
    Files are deleted only after the pruned ledger has been written, so a
    failed write leaves both the ledger and the files untouched.
    """

    def __init__(self, store: RenderRecordStore):
        self.store = store

    def cleanup(
        self,
        options: Optional[RetentionOptions] = None,
        now: Optional[datetime] = None,
    ) -> CleanupResult:
        """Run one retention pass.

        Args:
            options: Retention rules (defaults to ``RetentionOptions()``)
            now: Reference time (defaults to the current UTC time)

        Returns:
            CleanupResult with deleted file count, freed bytes and removed entries

        Raises:
            LedgerLockError: If the ledger lock cannot be acquired
            RecordStoreError: If the pruned ledger cannot be written
        """
        options = options or RetentionOptions()
        moment = now or datetime.now(timezone.utc)
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        cutoff = moment - timedelta(days=options.keep_days)

        dropped: list[RenderMetadata] = []
        with self.store.transaction() as metadata:
            kept: list[RenderMetadata] = []
            successful_kept = 0

            for entry in metadata.renders:
                timestamp = parse_iso_timestamp(entry.timestamp)
                is_recent = timestamp is not None and timestamp > cutoff
                if timestamp is None:
                    logger.debug(f"Unparseable timestamp on {entry.id}, treating as old")

                keep = (
                    is_recent
                    or (entry.success and successful_kept < options.keep_successful)
                    or (not entry.success and not options.delete_failed)
                )
                if keep:
                    kept.append(entry)
                    if entry.success:
                        successful_kept += 1
                    continue

                dropped.append(entry)

            metadata.replace_renders(kept)

        # Files go only after the pruned ledger is on disk
        result = CleanupResult(entries_removed=len(dropped))
        for entry in dropped:
            freed = self._delete_output(entry)
            if freed is not None:
                result.files_deleted += 1
                result.space_freed += freed

        log_cleanup_completed(result.entries_removed, result.files_deleted, result.space_freed)
        return result

    def _delete_output(self, entry: RenderMetadata) -> Optional[int]:
        """Delete an entry's output file, returning the bytes freed.

        Returns None when nothing was deleted.
        """
        path = Path(entry.output_path)
        try:
            size = path.stat().st_size
            path.unlink()
        except FileNotFoundError:
            logger.debug(f"Output already gone for {entry.id}: {path}")
            return None
        except OSError as e:
            logger.warning(f"Failed to delete output for {entry.id} ({path}): {e}")
            return None
        logger.debug(f"Deleted {path} ({size} bytes)")
        return size
