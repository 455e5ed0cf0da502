"""
Module: layout.models

Purpose:
    Data models for page layout.
    Immutable dataclasses describing where each image and caption line
    goes on its page. Coordinates are PDF points measured from the page's
    top-left corner (y grows downwards); the renderer flips them.

Key Classes:
    - ImagePlacement: Scaled image rectangle on a page
    - CaptionBlock: Wrapped, centred caption lines
    - PagePlan: Complete layout for one page (one entry)
    - DocumentLayout: All page plans plus warnings

Dependencies:
    - dataclasses (std)

Used By:
    - layout.paginator: Creates PagePlans
    - output.renderer: Draws PagePlans
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class ImagePlacement:
    """
    An image rectangle positioned on a page.

    Attributes:
        x: Left edge (points from page left)
        y: Top edge (points from page top)
        width: Rendered width in points
        height: Rendered height in points

    Example:
        >>> placement = ImagePlacement(x=10, y=20, width=100, height=50)
        >>> placement.bottom
        70
    """

    x: float
    y: float
    width: float
    height: float

    @property
    def bottom(self) -> float:
        """Bottom Y coordinate (y + height)."""
        return self.y + self.height

    @property
    def aspect(self) -> float:
        return self.width / self.height if self.height else 0.0


@dataclass(frozen=True)
class CaptionBlock:
    """
    Caption text laid out below an image.

    Each line is centred on ``center_x``. Baselines start at
    ``first_baseline`` and advance by ``leading``.

    Attributes:
        lines: Wrapped caption lines, in reading order
        center_x: Horizontal centre of every line
        first_baseline: Baseline of the first line (points from page top)
        leading: Distance between consecutive baselines
        font_name: Font used for measuring and drawing
        font_size: Font size in points
    """

    lines: Tuple[str, ...]
    center_x: float
    first_baseline: float
    leading: float
    font_name: str
    font_size: float

    @property
    def baselines(self) -> Tuple[float, ...]:
        """Baseline Y of every line (points from page top)."""
        return tuple(self.first_baseline + i * self.leading for i in range(len(self.lines)))

    @property
    def last_baseline(self) -> float:
        return self.first_baseline + (len(self.lines) - 1) * self.leading

    @property
    def text(self) -> str:
        return " ".join(self.lines)


@dataclass(frozen=True)
class PagePlan:
    """
    Complete layout plan for a single page.

    Attributes:
        index: Page index (0-indexed, equals the entry's list position)
        entry_id: Id of the entry rendered on this page
        page_width: Page width in points
        page_height: Page height in points
        content_width: Content box width in points
        content_height: Content box height available to the image
        image: Image placement
        caption: Caption layout, or None when no caption is rendered

    Example:
        >>> page.page_number
        1
    """

    index: int
    entry_id: str
    page_width: float
    page_height: float
    content_width: float
    content_height: float
    image: ImagePlacement
    caption: Optional[CaptionBlock] = None

    @property
    def page_number(self) -> int:
        """1-based page number."""
        return self.index + 1

    @property
    def has_caption(self) -> bool:
        return self.caption is not None

    @property
    def caption_overflows(self) -> bool:
        """True when the last caption line sits below the physical page."""
        if self.caption is None:
            return False
        return self.caption.last_baseline > self.page_height


@dataclass(frozen=True)
class DocumentLayout:
    """
    Layout output for a whole document.

    Attributes:
        pages: Tuple of PagePlans in document order
        warnings: Human-readable layout warnings (e.g. caption overflow)

    Example:
        >>> layout = DocumentLayout(pages=(page1, page2))
        >>> layout.page_count
        2
    """

    pages: Tuple[PagePlan, ...]
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def page_count(self) -> int:
        """Number of pages in layout."""
        return len(self.pages)

    @property
    def is_empty(self) -> bool:
        return not self.pages

    @property
    def entry_ids(self) -> Tuple[str, ...]:
        """Entry ids in page order."""
        return tuple(page.entry_id for page in self.pages)
