"""
Module: captions.service

Purpose:
    Run caption requests for collection entries in the background.
    The entry's pending flag is set before dispatch and cleared in every
    outcome; a successful caption and the cleared flag land in one step.
    A result for an entry removed in the meantime is dropped. Worker
    failures never escape: they come back in the outcome.

Key Classes:
    - CaptionOutcome: Result of one request
    - CaptionService: Thread pool-based caption request runner

Dependencies:
    - concurrent.futures: Thread pool execution
    - captions.adapter: Caption source

Used By:
    - cli: --auto-caption
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional

from snapdoc.collection.manager import PageCollection
from snapdoc.collection.models import ImageBlob

from .adapter import CaptionAdapter, CaptionError, CaptionServiceError

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[str, CaptionError], None]


@dataclass(frozen=True)
class CaptionOutcome:
    """
    Result of one caption request.

    Attributes:
        entry_id: Entry the caption was requested for
        caption: Caption text, or None on failure or unknown entry
        error: Failure, or None on success
        applied: True if the caption was written to a still-present entry
    """

    entry_id: str
    caption: Optional[str] = None
    error: Optional[CaptionError] = None
    applied: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and self.caption is not None


class CaptionService:
    """
    Background caption requests for a PageCollection.

    Requests run in parallel and may finish in any order. Nothing is
    retried; failures are logged, passed to ``on_error`` and returned in
    the outcome.

    Usage:
        with CaptionService(pages, OpenAICaptionAdapter()) as captions:
            futures = captions.request_all()
            for future in futures:
                outcome = future.result()
    """

    def __init__(
        self,
        collection: PageCollection,
        adapter: CaptionAdapter,
        *,
        max_workers: int = 4,
        on_error: Optional[ErrorCallback] = None,
    ):
        self.collection = collection
        self.adapter = adapter
        self.on_error = on_error
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="snapdoc-caption",
        )
        self._futures: List[Future] = []

    def request(self, entry_id: str) -> "Future[CaptionOutcome]":
        """
        Request a caption for one entry.

        Args:
            entry_id: Entry id

        Returns:
            Future resolving to a CaptionOutcome (never raises)
        """
        entry = self.collection.get(entry_id)
        if entry is None:
            logger.debug(f"Caption request ignored, no entry {entry_id}")
            done: Future = Future()
            done.set_result(CaptionOutcome(entry_id=entry_id))
            return done

        self.collection.set_caption_pending(entry_id, True)
        try:
            future = self._executor.submit(self._run, entry_id, entry.to_blob())
        except RuntimeError:
            self.collection.set_caption_pending(entry_id, False)
            raise
        self._futures.append(future)
        return future

    def request_all(self, *, only_empty: bool = True) -> List["Future[CaptionOutcome]"]:
        """Request captions for every entry (by default only those without one)."""
        return [
            self.request(entry.id)
            for entry in self.collection.snapshot()
            if not (only_empty and entry.caption)
        ]

    def wait_all(self, timeout: Optional[float] = None) -> List[CaptionOutcome]:
        """
        Wait for all outstanding requests.

        Args:
            timeout: Max seconds to wait per request (None = indefinite)

        Returns:
            Outcomes in request order
        """
        outcomes = [future.result(timeout=timeout) for future in self._futures]
        self._futures.clear()
        return outcomes

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "CaptionService":
        return self

    def __exit__(self, *args) -> None:
        self.shutdown()

    def _run(self, entry_id: str, blob: ImageBlob) -> CaptionOutcome:
        try:
            caption = self._request_caption(blob)
        except CaptionError as e:
            self.collection.set_caption_pending(entry_id, False)
            logger.warning(f"Caption failed for {blob.name or entry_id}: {e.reason}")
            self._report_error(entry_id, e)
            return CaptionOutcome(entry_id=entry_id, error=e)

        applied = self.collection.complete_caption(entry_id, caption)
        if not applied:
            logger.debug(f"Entry {entry_id} was removed before its caption arrived")
        return CaptionOutcome(entry_id=entry_id, caption=caption, applied=applied)

    def _request_caption(self, blob: ImageBlob) -> str:
        """Call the adapter; unexpected adapter errors become CaptionServiceError."""
        try:
            return self.adapter.request_caption(blob)
        except CaptionError:
            raise
        except Exception as e:
            logger.exception(f"Caption adapter raised unexpectedly for {blob.name or '<unnamed>'}")
            raise CaptionServiceError(f"Unexpected caption failure: {e}") from e

    def _report_error(self, entry_id: str, error: CaptionError) -> None:
        if self.on_error is None:
            return
        try:
            self.on_error(entry_id, error)
        except Exception:
            logger.exception(f"Caption error callback failed for {entry_id}")
