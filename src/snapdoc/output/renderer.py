"""
Module: output.renderer

Purpose:
    Render page entries to a PDF using ReportLab.
    Each PagePlan becomes one PDF page with its image placed at the
    planned rectangle and its caption lines centred below.

Key Functions:
    - render(): Main rendering function (entries + config -> artifact)

Key Classes:
    - DocumentArtifact: Page plans plus the finished PDF bytes
    - RenderError: Any failure while building the document

Dependencies:
    - reportlab: PDF generation
    - PIL: Image decoding
    - layout.paginator: Page plans

Used By:
    - output.writer: Persistence
    - controller: Export pipeline
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Sequence, Tuple

from PIL import Image, ImageOps
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from snapdoc.collection.models import PageEntry
from snapdoc.layout import DocumentLayout, PagePlan, RenderConfig, paginate
from snapdoc.layout.config import CAPTION_COLOR_RGB

logger = logging.getLogger(__name__)

DOCUMENT_TITLE = "SnapDoc export"


class RenderError(Exception):
    """Error while building or persisting a document."""
    pass


@dataclass(frozen=True)
class DocumentArtifact:
    """
    A finished document, ready for persistence (immutable).

    Attributes:
        layout: Page plans the PDF was drawn from
        pdf_bytes: Serialized PDF (empty when there are no pages)
        config: Render configuration used

    Example:
        >>> artifact = render(entries, RenderConfig())
        >>> artifact.page_count
        2
    """

    layout: DocumentLayout
    pdf_bytes: bytes
    config: RenderConfig

    @property
    def pages(self) -> Tuple[PagePlan, ...]:
        return self.layout.pages

    @property
    def page_count(self) -> int:
        """Number of pages in the document."""
        return self.layout.page_count

    @property
    def is_empty(self) -> bool:
        return self.layout.is_empty

    @property
    def warnings(self) -> Tuple[str, ...]:
        return self.layout.warnings


def render(entries: Sequence[PageEntry], config: RenderConfig) -> DocumentArtifact:
    """
    Render entries to a PDF document, one page per entry.

    The entries are copied into a tuple first, so later changes to the
    caller's list do not affect the document. No I/O is performed.

    Args:
        entries: Ordered page entries
        config: Render configuration

    Returns:
        DocumentArtifact (zero pages and empty bytes for no entries)

    Raises:
        RenderError: If an image cannot be decoded or the PDF cannot be built

    Example:
        >>> artifact = render(collection.snapshot(), RenderConfig(include_captions=False))
    """
    entries = tuple(entries)
    layout = paginate(entries, config)

    if layout.is_empty:
        logger.info("No entries, rendered an empty document")
        return DocumentArtifact(layout=layout, pdf_bytes=b"", config=config)

    buf = io.BytesIO()
    try:
        c = canvas.Canvas(buf, pagesize=(layout.pages[0].page_width, layout.pages[0].page_height))
        c.setTitle(DOCUMENT_TITLE)
        c.setCreator(_get_creator())

        for page, entry in zip(layout.pages, entries):
            _render_page(c, page, entry)
            c.showPage()

        c.save()
    except RenderError:
        raise
    except Exception as e:
        raise RenderError(f"Failed to build PDF: {e}") from e

    logger.info(f"Rendered {layout.page_count} pages ({config.paper_size.value}, {config.orientation.value})")
    return DocumentArtifact(layout=layout, pdf_bytes=buf.getvalue(), config=config)


def _render_page(c: canvas.Canvas, page: PagePlan, entry: PageEntry) -> None:
    """
    Draw one page: the image, then the caption (if planned).

    Args:
        c: ReportLab canvas
        page: Page plan
        entry: Entry whose image is drawn
    """
    c.setPageSize((page.page_width, page.page_height))

    try:
        img_reader = _pil_to_reader(entry.image_data.open())
    except Exception as e:
        raise RenderError(
            f"Cannot decode image for page {page.page_number} ({entry.name or entry.id}): {e}"
        ) from e

    image = page.image
    c.drawImage(
        img_reader,
        image.x,
        _transform_y(page.page_height, image.y, image.height),
        width=image.width,
        height=image.height,
        mask="auto",
    )

    if page.caption is not None:
        _draw_caption(c, page)


def _draw_caption(c: canvas.Canvas, page: PagePlan) -> None:
    """Draw the caption lines centred on the page."""
    caption = page.caption
    r, g, b = CAPTION_COLOR_RGB

    c.saveState()
    c.setFont(caption.font_name, caption.font_size)
    c.setFillColorRGB(r / 255, g / 255, b / 255)
    for line, baseline in zip(caption.lines, caption.baselines):
        c.drawCentredString(caption.center_x, page.page_height - baseline, line)
    c.restoreState()


def _pil_to_reader(img: Image.Image) -> ImageReader:
    """
    Convert PIL image to ReportLab ImageReader.

    EXIF rotation is applied so the drawn image matches the dimensions
    captured at ingestion.

    Args:
        img: PIL Image object

    Returns:
        ImageReader for use with ReportLab
    """
    with img:
        upright = ImageOps.exif_transpose(img)
        if upright.mode not in ("RGB", "RGBA", "L", "LA"):
            has_alpha = upright.mode.endswith("A") or "transparency" in upright.info
            upright = upright.convert("RGBA" if has_alpha else "RGB")
        buf = io.BytesIO()
        upright.save(buf, format="PNG")
    buf.seek(0)
    return ImageReader(buf)


def _transform_y(page_height: float, y_top: float, height: float) -> float:
    """
    Convert a top-down Y coordinate to ReportLab's bottom-up origin.

    Args:
        page_height: Page height in points
        y_top: Distance from page top to the element's top edge
        height: Element height

    Returns:
        Y of the element's bottom edge, measured from the page bottom
    """
    return page_height - y_top - height


def _get_creator() -> str:
    from snapdoc import __version__
    return f"SnapDoc v{__version__}"
