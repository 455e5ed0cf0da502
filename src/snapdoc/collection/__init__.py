"""
Module: collection

Purpose:
    Ordered collection of page entries (one image per page) with
    ingestion, reordering and caption edits.

Key Functions:
    - build_entries(): Decode a batch of blobs into entries

Key Classes:
    - PageCollection: Authoritative ordered list
    - PageEntry: One image, caption and intrinsic size
    - ImageBlob: Raw bytes plus MIME type
    - IngestReport: Per-batch ingestion outcome

Dependencies:
    - PIL: Image decoding and thumbnails

Used By:
    - controller: Export pipeline
    - captions.service: Caption requests
"""

from .models import ImageBlob, ImageData, MoveDirection, PageEntry, PreviewHandle
from .ingestion import (
    DEFAULT_DIMENSION_TIMEOUT,
    IngestReport,
    IngestionDimensionFailure,
    build_entries,
    is_image_type,
    resolve_dimensions,
)
from .commands import (
    Command,
    CompleteCaption,
    InsertEntries,
    MoveEntry,
    RemoveEntry,
    SetCaptionPending,
    UpdateCaption,
)
from .manager import PageCollection

__all__ = [
    # Models
    "ImageBlob",
    "ImageData",
    "PreviewHandle",
    "PageEntry",
    "MoveDirection",
    # Ingestion
    "DEFAULT_DIMENSION_TIMEOUT",
    "IngestReport",
    "IngestionDimensionFailure",
    "build_entries",
    "is_image_type",
    "resolve_dimensions",
    # Commands
    "Command",
    "InsertEntries",
    "RemoveEntry",
    "MoveEntry",
    "UpdateCaption",
    "SetCaptionPending",
    "CompleteCaption",
    # Manager
    "PageCollection",
]
