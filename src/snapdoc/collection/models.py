"""
Module: collection.models

Purpose:
    Data models for the image collection.
    Entries are immutable; edits replace an entry with an updated copy
    that keeps its id and image data.

Key Classes:
    - ImageBlob: Raw image bytes tagged with a MIME type
    - PreviewHandle: Releasable thumbnail owned by one entry
    - ImageData: Blob plus preview, exclusively owned by an entry
    - PageEntry: One image, its caption and intrinsic size
    - MoveDirection: Earlier or later in the page order

Dependencies:
    - PIL: Thumbnail image
    - mimetypes (std): MIME guessing for files on disk

Used By:
    - collection.ingestion: Builds entries
    - collection.manager: Stores entries
    - layout.paginator: Reads id, size and caption
"""

from __future__ import annotations

import io
import mimetypes
import threading
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image


class MoveDirection(str, Enum):
    """Direction for swapping an entry with its neighbour."""

    EARLIER = "earlier"
    LATER = "later"

    @property
    def step(self) -> int:
        return -1 if self is MoveDirection.EARLIER else 1


@dataclass(frozen=True)
class ImageBlob:
    """
    Raw file content handed over by the file acquisition layer.

    Attributes:
        data: File bytes
        mime_type: Declared content type, e.g. "image/png"
        name: File name, used for reporting

    Example:
        >>> blob = ImageBlob.from_path(Path("holiday.jpg"))
        >>> blob.mime_type
        'image/jpeg'
    """

    data: bytes
    mime_type: str
    name: str = ""

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ImageBlob":
        """Read a file and guess its MIME type from the name."""
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(
            data=path.read_bytes(),
            mime_type=mime_type or "application/octet-stream",
            name=path.name,
        )

    def __repr__(self) -> str:
        return f"ImageBlob(name={self.name!r}, mime_type={self.mime_type!r}, size={len(self.data)})"


class PreviewHandle:
    """
    Decoded thumbnail for displaying an entry.

    Owned by exactly one entry. ``release()`` frees the bitmap; it is
    idempotent and safe to call from any thread.
    """

    def __init__(self, image: Image.Image):
        self._image: Optional[Image.Image] = image
        self._size: Tuple[int, int] = image.size
        self._lock = threading.Lock()

    @property
    def size(self) -> Tuple[int, int]:
        """Thumbnail (width, height); still available after release."""
        return self._size

    @property
    def released(self) -> bool:
        return self._image is None

    @property
    def image(self) -> Image.Image:
        """
        The thumbnail image.

        Raises:
            RuntimeError: If the handle was already released
        """
        image = self._image
        if image is None:
            raise RuntimeError("Preview handle has been released")
        return image

    def to_png_bytes(self) -> bytes:
        buf = io.BytesIO()
        self.image.save(buf, format="PNG")
        return buf.getvalue()

    def release(self) -> None:
        with self._lock:
            image, self._image = self._image, None
        if image is not None:
            image.close()

    def __repr__(self) -> str:
        state = "released" if self.released else f"{self._size[0]}x{self._size[1]}"
        return f"PreviewHandle({state})"


@dataclass(frozen=True)
class ImageData:
    """
    Image content owned by an entry.

    Attributes:
        blob: Original bytes and MIME type (never modified)
        preview: Thumbnail handle, released when the entry is removed
    """

    blob: ImageBlob
    preview: PreviewHandle

    @property
    def raw(self) -> bytes:
        return self.blob.data

    @property
    def mime_type(self) -> str:
        return self.blob.mime_type

    @property
    def name(self) -> str:
        return self.blob.name

    def open(self) -> Image.Image:
        """Decode the full image from the original bytes."""
        return Image.open(io.BytesIO(self.blob.data))

    def release(self) -> None:
        self.preview.release()


@dataclass(frozen=True)
class PageEntry:
    """
    One page-to-be (immutable).

    Attributes:
        id: Unique id, stable until removal and never reused
        image_data: Image bytes and preview handle
        width: Intrinsic pixel width, captured at insertion
        height: Intrinsic pixel height, captured at insertion
        caption: Caption text (empty by default)
        caption_pending: True while a caption request is outstanding

    Example:
        >>> entry.with_caption("Sunset").caption
        'Sunset'
    """

    id: str
    image_data: ImageData
    width: int
    height: int
    caption: str = ""
    caption_pending: bool = False

    @property
    def name(self) -> str:
        return self.image_data.name

    def with_caption(self, caption: str) -> "PageEntry":
        return replace(self, caption=caption)

    def with_caption_pending(self, pending: bool) -> "PageEntry":
        return replace(self, caption_pending=pending)

    def to_blob(self) -> ImageBlob:
        """Original bytes and MIME type, as sent to the caption service."""
        return self.image_data.blob
