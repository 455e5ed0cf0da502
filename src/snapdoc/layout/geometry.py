"""
Module: layout.geometry

Purpose:
    Page geometry helpers: page dimensions for a render config,
    aspect-preserving scale-to-fit, and caption word wrapping.

Key Functions:
    - page_geometry(): PageGeometry for a RenderConfig
    - aspect_ratio(): Image aspect with the zero-dimension fallback
    - fit_image(): Scale-to-fit placement, centred and top-aligned
    - wrap_caption(): Word-wrap caption text to a width

Dependencies:
    - reportlab.lib.utils.simpleSplit: Font-metric word wrapping

Used By:
    - layout.paginator: Per-page layout
"""

from __future__ import annotations

from typing import Tuple

from reportlab.lib.utils import simpleSplit

from .config import (
    CAPTION_BAND_PT,
    PAGE_MARGIN_PT,
    Orientation,
    PageGeometry,
    RenderConfig,
)
from .models import ImagePlacement

DEGENERATE_ASPECT = 1.0


def page_dimensions(config: RenderConfig) -> Tuple[float, float]:
    """Return (width, height) in points, swapped for landscape."""
    width, height = config.paper_size.dimensions
    if config.orientation is Orientation.LANDSCAPE:
        return height, width
    return width, height


def page_geometry(config: RenderConfig) -> PageGeometry:
    """
    Build the page geometry for a render config.

    Args:
        config: Render configuration

    Returns:
        PageGeometry with the caption band reserved when captions are on
    """
    width, height = page_dimensions(config)
    return PageGeometry(
        page_width=width,
        page_height=height,
        margin=PAGE_MARGIN_PT,
        caption_band=CAPTION_BAND_PT if config.include_captions else 0.0,
    )


def aspect_ratio(width: int, height: int) -> float:
    """
    Width/height ratio of an image.

    Zero (or negative) dimensions are degenerate and fall back to a
    square aspect instead of dividing by zero.
    """
    if width <= 0 or height <= 0:
        return DEGENERATE_ASPECT
    return width / height


def fit_image(width: int, height: int, geometry: PageGeometry) -> ImagePlacement:
    """
    Scale an image to fit the content box, preserving aspect ratio.

    An image relatively wider than the box fills the box width; otherwise
    it fills the box height. The result is centred horizontally on the
    full page width and top-aligned at the top margin.

    Args:
        width: Intrinsic image width in pixels
        height: Intrinsic image height in pixels
        geometry: Page geometry

    Returns:
        ImagePlacement in page points

    Example:
        >>> geometry = PageGeometry(page_width=600, page_height=800, margin=50)
        >>> fit_image(1000, 500, geometry)
        ImagePlacement(x=50.0, y=50, width=500, height=250.0)
    """
    image_aspect = aspect_ratio(width, height)

    if image_aspect > geometry.content_aspect:
        final_width = geometry.content_width
        final_height = final_width / image_aspect
    else:
        final_height = geometry.content_height
        final_width = final_height * image_aspect

    x = (geometry.page_width - final_width) / 2
    return ImagePlacement(x=x, y=geometry.margin, width=final_width, height=final_height)


def wrap_caption(
    text: str,
    max_width: float,
    font_name: str,
    font_size: float,
) -> Tuple[str, ...]:
    """
    Word-wrap caption text to a maximum line width.

    Explicit newlines start new lines. Words longer than the width are
    kept whole on their own line. Text is never truncated.

    Args:
        text: Caption text
        max_width: Maximum line width in points
        font_name: Font used for measurement
        font_size: Font size in points

    Returns:
        Tuple of lines (empty for empty text)
    """
    if not text:
        return ()
    return tuple(simpleSplit(text, font_name, font_size, max_width))
