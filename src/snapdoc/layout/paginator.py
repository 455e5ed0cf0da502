"""
Module: layout.paginator

Purpose:
    Turn an ordered sequence of page entries into page plans.
    One page per entry, in input order; entries are never combined
    or split across pages.

Key Functions:
    - layout_page(): Plan a single page
    - paginate(): Plan every page of a document

Dependencies:
    - layout.geometry: Page geometry, scale-to-fit, caption wrapping

Used By:
    - output.renderer: Draws the plans into a PDF
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Sequence

from .config import (
    CAPTION_FONT_NAME,
    CAPTION_FONT_SIZE,
    CAPTION_GAP_PT,
    CAPTION_LINE_HEIGHT_FACTOR,
    PageGeometry,
    RenderConfig,
)
from .geometry import fit_image, page_geometry, wrap_caption
from .models import CaptionBlock, DocumentLayout, PagePlan

if TYPE_CHECKING:
    from snapdoc.collection.models import PageEntry

logger = logging.getLogger(__name__)


def layout_page(
    index: int,
    entry: "PageEntry",
    geometry: PageGeometry,
    config: RenderConfig,
) -> PagePlan:
    """
    Plan the page for one entry.

    Args:
        index: Page index (0-indexed)
        entry: Entry to place
        geometry: Page geometry for this config
        config: Render configuration

    Returns:
        PagePlan with the image placement and, when captions are enabled
        and the entry has a non-empty caption, the wrapped caption lines
    """
    image = fit_image(entry.width, entry.height, geometry)

    caption = None
    if config.include_captions and entry.caption:
        lines = wrap_caption(
            entry.caption,
            geometry.content_width,
            CAPTION_FONT_NAME,
            CAPTION_FONT_SIZE,
        )
        if lines:
            caption = CaptionBlock(
                lines=lines,
                center_x=geometry.page_width / 2,
                first_baseline=image.bottom + CAPTION_GAP_PT,
                leading=CAPTION_FONT_SIZE * CAPTION_LINE_HEIGHT_FACTOR,
                font_name=CAPTION_FONT_NAME,
                font_size=CAPTION_FONT_SIZE,
            )

    return PagePlan(
        index=index,
        entry_id=entry.id,
        page_width=geometry.page_width,
        page_height=geometry.page_height,
        content_width=geometry.content_width,
        content_height=geometry.content_height,
        image=image,
        caption=caption,
    )


def paginate(entries: Sequence["PageEntry"], config: RenderConfig) -> DocumentLayout:
    """
    Lay out every entry on its own page, in order.

    An empty sequence yields an empty layout. Captions that run past the
    bottom of the page are kept whole (no shrinking, no truncation) and
    reported as warnings.

    Args:
        entries: Ordered page entries
        config: Render configuration

    Returns:
        DocumentLayout with one PagePlan per entry

    Example:
        >>> layout = paginate(collection.snapshot(), RenderConfig())
        >>> layout.page_count == len(collection)
        True
    """
    geometry = page_geometry(config)
    pages: List[PagePlan] = []
    warnings: List[str] = []

    for index, entry in enumerate(entries):
        if entry.width <= 0 or entry.height <= 0:
            logger.debug(
                f"Entry {entry.id} has degenerate size {entry.width}x{entry.height}, "
                "using square aspect"
            )
        page = layout_page(index, entry, geometry, config)
        if page.caption_overflows:
            message = f"Caption on page {page.page_number} runs past the bottom of the page"
            logger.warning(message)
            warnings.append(message)
        pages.append(page)

    logger.debug(f"Paginated {len(pages)} pages ({config.paper_size.value}, {config.orientation.value})")
    return DocumentLayout(pages=tuple(pages), warnings=tuple(warnings))
