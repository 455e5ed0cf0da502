"""
Module: collection.manager

Purpose:
    The authoritative ordered list of page entries.
    List position is page order. All mutations go through apply() and are
    atomic under one lock; commands that name an unknown id are no-ops,
    so late caption results for removed entries are harmless.

Key Classes:
    - PageCollection: Ordered entries with insert/remove/move/caption edits

Dependencies:
    - threading (std): Mutation lock
    - collection.ingestion: Blob decoding

Used By:
    - captions.service: Pending flag and caption results
    - controller: Export snapshots
    - cli: Batch front end
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from .commands import (
    Command,
    CompleteCaption,
    InsertEntries,
    MoveEntry,
    RemoveEntry,
    SetCaptionPending,
    UpdateCaption,
)
from .ingestion import (
    DEFAULT_DIMENSION_TIMEOUT,
    DEFAULT_MAX_WORKERS,
    IngestReport,
    build_entries,
)
from .models import ImageBlob, MoveDirection, PageEntry

logger = logging.getLogger(__name__)


class PageCollection:
    """
    Ordered page entries.

    Thread-safe: commands may be applied from worker threads (caption
    results) while the owner edits the list.

    Usage:
        with PageCollection() as pages:
            report = pages.insert(blobs)
            pages.move(0, MoveDirection.LATER)
            pages.update_caption(report.entries[0].id, "Sunset")
            entries = pages.snapshot()

    Attributes:
        dimension_timeout: Seconds allowed to resolve each image's size
        max_workers: Maximum concurrent ingestion threads
    """

    def __init__(
        self,
        *,
        dimension_timeout: float = DEFAULT_DIMENSION_TIMEOUT,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        self.dimension_timeout = dimension_timeout
        self.max_workers = max_workers
        self._entries: List[PageEntry] = []
        self._issued_ids: Set[str] = set()
        self._lock = threading.RLock()
        self._closed = False

    # ---- commands ----

    def apply(self, command: Command) -> bool:
        """
        Apply one command atomically.

        Args:
            command: Edit command

        Returns:
            True if the list changed, False for a no-op

        Raises:
            RuntimeError: If entries are inserted after close()
            ValueError: If inserted entries reuse an id
            TypeError: For an unknown command type
        """
        with self._lock:
            if isinstance(command, InsertEntries):
                if self._closed:
                    raise RuntimeError("PageCollection is closed")
                return self._insert(command.entries)
            if isinstance(command, RemoveEntry):
                return self._remove(command.entry_id)
            if isinstance(command, MoveEntry):
                return self._move(command.index, command.direction)
            if isinstance(command, UpdateCaption):
                return self._replace(command.entry_id, lambda e: e.with_caption(command.text))
            if isinstance(command, SetCaptionPending):
                return self._replace(
                    command.entry_id, lambda e: e.with_caption_pending(command.pending)
                )
            if isinstance(command, CompleteCaption):
                return self._replace(
                    command.entry_id,
                    lambda e: e.with_caption(command.text).with_caption_pending(False),
                )
        raise TypeError(f"Unknown command: {command!r}")

    def insert(self, blobs: Iterable[ImageBlob]) -> IngestReport:
        """
        Ingest blobs and append one entry per readable image.

        Decoding happens outside the lock; the finished entries are then
        appended in one atomic step. If the collection is closed while
        decoding, the new previews are released and RuntimeError is raised.

        Returns:
            IngestReport listing created entries and skipped files
        """
        if self._closed:
            raise RuntimeError("PageCollection is closed")
        report = build_entries(
            blobs,
            timeout=self.dimension_timeout,
            max_workers=self.max_workers,
        )
        if report.entries:
            try:
                self.apply(InsertEntries(report.entries))
            except (RuntimeError, ValueError):
                for entry in report.entries:
                    entry.image_data.release()
                raise
        return report

    def remove(self, entry_id: str) -> bool:
        return self.apply(RemoveEntry(entry_id))

    def move(self, index: int, direction: MoveDirection) -> bool:
        return self.apply(MoveEntry(index, MoveDirection(direction)))

    def update_caption(self, entry_id: str, text: str) -> bool:
        return self.apply(UpdateCaption(entry_id, text))

    def set_caption_pending(self, entry_id: str, pending: bool) -> bool:
        return self.apply(SetCaptionPending(entry_id, pending))

    def complete_caption(self, entry_id: str, text: str) -> bool:
        """Store a caption result and clear the pending flag atomically."""
        return self.apply(CompleteCaption(entry_id, text))

    # ---- reads ----

    def snapshot(self) -> Tuple[PageEntry, ...]:
        """Current entries in page order (immutable)."""
        with self._lock:
            return tuple(self._entries)

    def get(self, entry_id: str) -> Optional[PageEntry]:
        with self._lock:
            index = self._find(entry_id)
            return None if index is None else self._entries[index]

    def index_of(self, entry_id: str) -> Optional[int]:
        with self._lock:
            return self._find(entry_id)

    def ids(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(e.id for e in self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[PageEntry]:
        return iter(self.snapshot())

    # ---- teardown ----

    def close(self) -> None:
        """Release every preview and empty the list."""
        with self._lock:
            if self._closed:
                return
            entries, self._entries = self._entries, []
            self._closed = True
        for entry in entries:
            entry.image_data.release()
        logger.debug(f"Closed collection, released {len(entries)} previews")

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "PageCollection":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    # ---- internal (lock held) ----

    def _find(self, entry_id: str) -> Optional[int]:
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return index
        return None

    def _insert(self, entries: Tuple[PageEntry, ...]) -> bool:
        new_ids = [e.id for e in entries]
        if len(set(new_ids)) != len(new_ids) or self._issued_ids.intersection(new_ids):
            raise ValueError("Inserted entries must have ids never used in this collection")
        self._entries.extend(entries)
        self._issued_ids.update(new_ids)
        logger.debug(f"Inserted {len(entries)} entries ({len(self._entries)} total)")
        return bool(entries)

    def _remove(self, entry_id: str) -> bool:
        index = self._find(entry_id)
        if index is None:
            logger.debug(f"Remove ignored, no entry {entry_id}")
            return False
        entry = self._entries.pop(index)
        entry.image_data.release()
        logger.debug(f"Removed entry {entry_id} from position {index}")
        return True

    def _move(self, index: int, direction: MoveDirection) -> bool:
        target = index + direction.step
        if not (0 <= index < len(self._entries)) or not (0 <= target < len(self._entries)):
            return False
        self._entries[index], self._entries[target] = self._entries[target], self._entries[index]
        return True

    def _replace(self, entry_id: str, update) -> bool:
        index = self._find(entry_id)
        if index is None:
            logger.debug(f"Update ignored, no entry {entry_id}")
            return False
        self._entries[index] = update(self._entries[index])
        return True
