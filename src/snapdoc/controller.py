"""
Module: controller

Purpose:
    Orchestrate an export.
    Snapshot → Paginate → Render → Write

Key Functions:
    - export_document(): Main entry point for exporting a collection

Key Classes:
    - ExportResult: Outcome of an export

Dependencies:
    - collection: Entry snapshot
    - output: Rendering and persistence

Used By:
    - cli: Batch front end
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from .collection import PageCollection
from .layout import RenderConfig
from .output import RenderError, render, write_document

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportResult:
    """
    Outcome of one export (immutable).

    Attributes:
        path: Written PDF, or None when there was nothing to export
        page_count: Number of pages written
        entry_ids: Entry ids in page order
        warnings: Layout warnings (e.g. caption overflow)
        elapsed: Seconds spent rendering and writing
    """

    path: Optional[Path]
    page_count: int
    entry_ids: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    elapsed: float = 0.0


def export_document(
    collection: PageCollection,
    config: RenderConfig,
    output_dir: Path,
) -> ExportResult:
    """
    Export the collection's current order as one PDF.

    The entry list is snapshotted at the start; edits made while the
    export runs do not affect it. An empty collection writes nothing.

    Args:
        collection: Page collection
        config: Render configuration
        output_dir: Destination directory

    Returns:
        ExportResult with the written path

    Raises:
        RenderError: If rendering or writing fails (no file is left behind)

    Example:
        >>> result = export_document(pages, RenderConfig(), Path("exports"))
        >>> print(f"Wrote {result.page_count} pages to {result.path}")
    """
    start_time = time.perf_counter()
    entries = collection.snapshot()

    if not entries:
        logger.warning("Nothing to export: no images in the collection")
        return ExportResult(path=None, page_count=0)

    pending = sum(1 for e in entries if e.caption_pending)
    if pending:
        logger.info(f"Exporting while {pending} caption request(s) are still pending")

    logger.info(f"Exporting {len(entries)} pages to {output_dir}")
    artifact = render(entries, config)
    path = write_document(artifact, Path(output_dir))

    elapsed = time.perf_counter() - start_time
    logger.info(f"Export completed in {elapsed:.2f}s")

    return ExportResult(
        path=path,
        page_count=artifact.page_count,
        entry_ids=artifact.layout.entry_ids,
        warnings=artifact.warnings,
        elapsed=elapsed,
    )


__all__ = ["ExportResult", "RenderError", "export_document"]
