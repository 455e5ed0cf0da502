"""
Module: collection.ingestion

Purpose:
    Turn raw image blobs into fully constructed page entries.
    Intrinsic dimensions are resolved before an entry exists, so the
    collection never holds a partially built entry.

Key Functions:
    - is_image_type(): MIME filter for the ingestion boundary
    - resolve_dimensions(): Pixel size from the image header
    - create_preview(): Thumbnail preview handle
    - build_entries(): Concurrent batch ingestion with per-file timeout

Key Classes:
    - IngestionDimensionFailure: A file whose size could not be resolved
    - IngestReport: Entries created plus per-file failures

Dependencies:
    - PIL: Header decode and thumbnails
    - concurrent.futures: Thread pool for independent ingestion tasks
    - threading (std): Slot semaphore bounding concurrent decodes

Used By:
    - collection.manager: PageCollection.insert()
"""

from __future__ import annotations

import io
import logging
import threading
import time
import uuid
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from .models import ImageBlob, ImageData, PageEntry, PreviewHandle

logger = logging.getLogger(__name__)

DEFAULT_DIMENSION_TIMEOUT = 10.0  # seconds per file
DEFAULT_MAX_WORKERS = 4
PREVIEW_SIZE = (256, 256)

# EXIF orientations that rotate the image by 90 or 270 degrees
_EXIF_ORIENTATION_TAG = 0x0112
_TRANSPOSED_ORIENTATIONS = frozenset({5, 6, 7, 8})


class IngestionDimensionFailure(Exception):
    """The pixel dimensions of an image could not be resolved."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"{name or '<unnamed>'}: {reason}")


@dataclass(frozen=True)
class IngestReport:
    """
    Outcome of ingesting a batch of blobs.

    Attributes:
        entries: Entries created, in blob order
        failures: Files skipped because their size could not be resolved
        filtered: Names of blobs dropped for a non-image content type
    """

    entries: Tuple[PageEntry, ...] = ()
    failures: Tuple[IngestionDimensionFailure, ...] = ()
    filtered: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def ingested_count(self) -> int:
        return len(self.entries)

    @property
    def failed_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.failures)


def is_image_type(mime_type: str) -> bool:
    """True for ``image/*`` content types."""
    return mime_type.strip().lower().startswith("image/")


def resolve_dimensions(data: bytes, name: str = "") -> Tuple[int, int]:
    """
    Read the displayed (width, height) of an image.

    Only the header is decoded. EXIF rotation is honoured, so a portrait
    photo stored sideways reports portrait dimensions.

    Args:
        data: Image file bytes
        name: File name for error messages

    Returns:
        (width, height) in pixels

    Raises:
        IngestionDimensionFailure: If the bytes are not a readable image
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            width, height = img.size
            orientation = img.getexif().get(_EXIF_ORIENTATION_TAG)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise IngestionDimensionFailure(name, f"unreadable image ({e})") from e

    if orientation in _TRANSPOSED_ORIENTATIONS:
        width, height = height, width
    return width, height


def create_preview(data: bytes, size: Tuple[int, int] = PREVIEW_SIZE) -> PreviewHandle:
    """
    Decode a thumbnail for display.

    Raises:
        IngestionDimensionFailure: If the image cannot be decoded
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            thumb = ImageOps.exif_transpose(img)
            thumb.thumbnail(size)
            thumb.load()
            if thumb is img:
                thumb = thumb.copy()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise IngestionDimensionFailure("", f"cannot decode preview ({e})") from e
    return PreviewHandle(thumb)


def prepare_entry(blob: ImageBlob) -> PageEntry:
    """
    Build a complete entry for one image blob.

    Raises:
        IngestionDimensionFailure: If size or preview cannot be resolved
    """
    width, height = resolve_dimensions(blob.data, blob.name)
    try:
        preview = create_preview(blob.data)
    except IngestionDimensionFailure as e:
        raise IngestionDimensionFailure(blob.name, e.reason) from e
    return PageEntry(
        id=uuid.uuid4().hex,
        image_data=ImageData(blob=blob, preview=preview),
        width=width,
        height=height,
    )


class _DecodeTask:
    """
    One blob's decode, timed from the moment it starts running.

    Concurrency is bounded by ``slots``. A task that overruns its timeout
    is abandoned: its slot is handed back at once so queued files can
    start, even though its thread is still blocked.
    """

    def __init__(self, blob: ImageBlob, slots: threading.Semaphore):
        self.blob = blob
        self.started_at: Optional[float] = None
        self._slots = slots
        self._lock = threading.Lock()
        self._holds_slot = False

    def run(self) -> PageEntry:
        self._slots.acquire()
        with self._lock:
            self._holds_slot = True
        self.started_at = time.monotonic()
        try:
            return prepare_entry(self.blob)
        finally:
            self.release_slot()

    def release_slot(self) -> None:
        with self._lock:
            if self._holds_slot:
                self._holds_slot = False
                self._slots.release()


def _release_late_entry(future: Future) -> None:
    """Free the preview of an entry that finished after its timeout."""
    if future.cancelled() or future.exception() is not None:
        return
    future.result().image_data.release()


def build_entries(
    blobs: Iterable[ImageBlob],
    *,
    timeout: float = DEFAULT_DIMENSION_TIMEOUT,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> IngestReport:
    """
    Ingest a batch of blobs concurrently.

    Non-image blobs are dropped silently. Each remaining blob is decoded
    on its own thread, at most ``max_workers`` at a time. A blob that
    fails, or runs for longer than ``timeout`` seconds once started, is
    reported and skipped; a hung file frees its slot so the files queued
    behind it still run. Entries come back in blob order regardless of
    which finished first.

    Args:
        blobs: Blobs from the file acquisition layer
        timeout: Seconds each file may spend decoding
        max_workers: Maximum concurrent decodes

    Returns:
        IngestReport with created entries and per-file failures
    """
    accepted: List[ImageBlob] = []
    filtered: List[str] = []
    for blob in blobs:
        if is_image_type(blob.mime_type):
            accepted.append(blob)
        else:
            logger.debug(f"Ignoring {blob.name or '<unnamed>'} with content type {blob.mime_type!r}")
            filtered.append(blob.name)

    if not accepted:
        return IngestReport(filtered=tuple(filtered))

    results: Dict[int, PageEntry] = {}
    failed: Dict[int, IngestionDimensionFailure] = {}

    slots = threading.Semaphore(max(1, max_workers))
    executor = ThreadPoolExecutor(
        max_workers=len(accepted),
        thread_name_prefix="snapdoc-ingest",
    )
    try:
        tasks: Dict[Future, Tuple[int, _DecodeTask]] = {}
        for index, blob in enumerate(accepted):
            task = _DecodeTask(blob, slots)
            tasks[executor.submit(task.run)] = (index, task)

        pending = set(tasks)
        while pending:
            done, pending = wait(
                pending,
                timeout=_next_deadline(tasks, pending, timeout),
                return_when=FIRST_COMPLETED,
            )
            for future in done:
                index, task = tasks[future]
                try:
                    results[index] = future.result()
                except IngestionDimensionFailure as e:
                    logger.warning(f"Skipped {e}")
                    failed[index] = e

            now = time.monotonic()
            for future in list(pending):
                index, task = tasks[future]
                if task.started_at is None or now - task.started_at < timeout:
                    continue
                pending.discard(future)
                task.release_slot()
                future.add_done_callback(_release_late_entry)
                failure = IngestionDimensionFailure(
                    task.blob.name, f"dimension resolution timed out after {timeout:g}s"
                )
                logger.warning(f"Skipped {failure}")
                failed[index] = failure
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    entries = [results[i] for i in sorted(results)]
    failures = [failed[i] for i in sorted(failed)]
    logger.info(
        f"Ingested {len(entries)} of {len(accepted)} images"
        + (f" ({len(failures)} skipped)" if failures else "")
    )
    return IngestReport(entries=tuple(entries), failures=tuple(failures), filtered=tuple(filtered))


def _next_deadline(
    tasks: Dict[Future, Tuple[int, "_DecodeTask"]],
    pending: Set[Future],
    timeout: float,
) -> float:
    """Seconds until the earliest running task overruns (``timeout`` if none has started)."""
    started = [tasks[f][1].started_at for f in pending if tasks[f][1].started_at is not None]
    if not started:
        return timeout
    return max(0.0, min(started) + timeout - time.monotonic())
