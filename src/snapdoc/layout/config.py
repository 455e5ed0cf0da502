"""
Module: layout.config

Purpose:
    Export-time render configuration and the fixed page geometry constants
    used by the layout engine. All lengths are PDF points (1/72 inch).

Key Classes:
    - PaperSize: Supported paper sizes
    - Orientation: Portrait or landscape
    - RenderConfig: Immutable per-export configuration
    - PageGeometry: Page size, margins and content box for one config

Dependencies:
    - reportlab.lib.pagesizes / units: Paper dimensions in points

Used By:
    - layout.geometry: Content box and fit calculations
    - layout.paginator: Page plans
    - settings: Persisted defaults
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.units import mm


# Page furniture
PAGE_MARGIN_PT = 20 * mm
CAPTION_BAND_PT = 20 * mm  # Reserved below the image when captions are on
CAPTION_GAP_PT = 10 * mm  # Image bottom to first caption baseline

# Caption text
CAPTION_FONT_NAME = "Helvetica"
CAPTION_FONT_SIZE = 10
CAPTION_LINE_HEIGHT_FACTOR = 1.15
CAPTION_COLOR_RGB = (60, 60, 60)


class PaperSize(str, Enum):
    """Paper sizes available for export."""

    A4 = "a4"
    LETTER = "letter"

    @property
    def dimensions(self) -> Tuple[float, float]:
        """Portrait (width, height) in points."""
        return _PAPER_DIMENSIONS[self]

    @classmethod
    def parse(cls, value: Union[str, "PaperSize"]) -> "PaperSize":
        """
        Parse a user-facing value like "A4" or "letter".

        Raises:
            ValueError: If the value is not a known paper size
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown paper size {value!r} (expected one of: {choices})") from None


_PAPER_DIMENSIONS = {
    PaperSize.A4: (float(A4[0]), float(A4[1])),
    PaperSize.LETTER: (float(LETTER[0]), float(LETTER[1])),
}


class Orientation(str, Enum):
    """Page orientation."""

    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"

    @classmethod
    def parse(cls, value: Union[str, "Orientation"]) -> "Orientation":
        """
        Parse a user-facing value like "Portrait".

        Raises:
            ValueError: If the value is not a known orientation
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(o.value for o in cls)
            raise ValueError(f"Unknown orientation {value!r} (expected one of: {choices})") from None


@dataclass(frozen=True)
class RenderConfig:
    """
    Options for one export (immutable).

    Attributes:
        include_captions: Render captions below images and reserve a band for them
        paper_size: Paper size
        orientation: Portrait or landscape

    Example:
        >>> config = RenderConfig(paper_size=PaperSize.LETTER)
        >>> config.orientation
        <Orientation.PORTRAIT: 'portrait'>
    """

    include_captions: bool = True
    paper_size: PaperSize = PaperSize.A4
    orientation: Orientation = Orientation.PORTRAIT

    def __post_init__(self) -> None:
        """Validate enum membership on construction."""
        if not isinstance(self.paper_size, PaperSize):
            raise ValueError(f"paper_size must be a PaperSize: {self.paper_size!r}")
        if not isinstance(self.orientation, Orientation):
            raise ValueError(f"orientation must be an Orientation: {self.orientation!r}")

    @classmethod
    def from_options(
        cls,
        include_captions: bool = True,
        paper_size: Union[str, PaperSize] = PaperSize.A4,
        orientation: Union[str, Orientation] = Orientation.PORTRAIT,
    ) -> "RenderConfig":
        """Build a config from raw toggle values (strings accepted for enums)."""
        return cls(
            include_captions=bool(include_captions),
            paper_size=PaperSize.parse(paper_size),
            orientation=Orientation.parse(orientation),
        )


@dataclass(frozen=True)
class PageGeometry:
    """
    Page and content box dimensions for a render config (immutable).

    The content box is the page minus the margin on every side. When a
    caption band is reserved it is taken from the bottom of the content
    box, so it reduces the height available to the image only.

    Attributes:
        page_width: Page width in points
        page_height: Page height in points
        margin: Margin on all four sides in points
        caption_band: Height reserved for captions in points (0 if none)

    Example:
        >>> geometry = PageGeometry(page_width=600, page_height=800, margin=50)
        >>> geometry.content_width, geometry.content_height
        (500, 700)
    """

    page_width: float
    page_height: float
    margin: float = PAGE_MARGIN_PT
    caption_band: float = 0.0

    def __post_init__(self) -> None:
        """Validate geometry on construction."""
        if self.page_width <= 0:
            raise ValueError(f"page_width must be positive: {self.page_width}")
        if self.page_height <= 0:
            raise ValueError(f"page_height must be positive: {self.page_height}")
        if self.margin < 0 or self.caption_band < 0:
            raise ValueError("margin and caption_band must be non-negative")
        if self.content_width <= 0:
            raise ValueError("Margins exceed page width")
        if self.content_height <= 0:
            raise ValueError("Margins and caption band exceed page height")

    @property
    def content_width(self) -> float:
        """Width available for the image and caption text."""
        return self.page_width - 2 * self.margin

    @property
    def content_height(self) -> float:
        """Height available for the image (after margins and caption band)."""
        return self.page_height - 2 * self.margin - self.caption_band

    @property
    def content_aspect(self) -> float:
        return self.content_width / self.content_height
