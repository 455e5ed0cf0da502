"""
Module: layout

Purpose:
    Page layout for image-to-PDF export.
    Converts ordered page entries into positioned page plans.

Key Functions:
    - paginate(): Main entry point for layout
    - fit_image(): Aspect-preserving scale-to-fit

Key Classes:
    - RenderConfig: Export options (captions, paper size, orientation)
    - PageGeometry: Page and content box dimensions
    - PagePlan: Single page layout plan
    - DocumentLayout: All page plans

Dependencies:
    - reportlab: Paper sizes and font metrics

Used By:
    - output.renderer: PDF rendering
"""

from .config import (
    CAPTION_BAND_PT,
    CAPTION_FONT_NAME,
    CAPTION_FONT_SIZE,
    CAPTION_GAP_PT,
    PAGE_MARGIN_PT,
    Orientation,
    PageGeometry,
    PaperSize,
    RenderConfig,
)
from .models import CaptionBlock, DocumentLayout, ImagePlacement, PagePlan
from .geometry import aspect_ratio, fit_image, page_dimensions, page_geometry, wrap_caption
from .paginator import layout_page, paginate

__all__ = [
    # Config
    "RenderConfig",
    "PaperSize",
    "Orientation",
    "PageGeometry",
    "PAGE_MARGIN_PT",
    "CAPTION_BAND_PT",
    "CAPTION_GAP_PT",
    "CAPTION_FONT_NAME",
    "CAPTION_FONT_SIZE",
    # Models
    "ImagePlacement",
    "CaptionBlock",
    "PagePlan",
    "DocumentLayout",
    # Functions
    "aspect_ratio",
    "fit_image",
    "page_dimensions",
    "page_geometry",
    "wrap_caption",
    "layout_page",
    "paginate",
]
