"""
Unit tests for render configuration and page geometry.
"""

import pytest
from reportlab.lib.pagesizes import A4, LETTER

from snapdoc.layout import (
    CAPTION_BAND_PT,
    PAGE_MARGIN_PT,
    Orientation,
    PageGeometry,
    PaperSize,
    RenderConfig,
    page_dimensions,
    page_geometry,
)


class TestRenderConfig:
    """Tests for RenderConfig dataclass."""

    def test_init_when_defaults_then_captions_a4_portrait(self):
        """Defaults match the export toggles' initial state."""
        config = RenderConfig()

        assert config.include_captions is True
        assert config.paper_size is PaperSize.A4
        assert config.orientation is Orientation.PORTRAIT

    def test_init_when_string_paper_size_then_raises_error(self):
        """Only enum members are accepted directly."""
        with pytest.raises(ValueError, match="paper_size"):
            RenderConfig(paper_size="a4")

    def test_from_options_when_strings_then_parses_case_insensitively(self):
        config = RenderConfig.from_options(False, "Letter", "LANDSCAPE")

        assert config == RenderConfig(
            include_captions=False,
            paper_size=PaperSize.LETTER,
            orientation=Orientation.LANDSCAPE,
        )

    def test_parse_when_unknown_value_then_lists_choices(self):
        with pytest.raises(ValueError, match="a4, letter"):
            PaperSize.parse("legal")
        with pytest.raises(ValueError, match="portrait, landscape"):
            Orientation.parse("sideways")

    def test_config_is_immutable(self):
        config = RenderConfig()
        with pytest.raises(Exception):
            config.include_captions = False  # type: ignore[misc]


class TestPageGeometry:
    """Tests for PageGeometry and page_geometry()."""

    def test_content_box_when_no_caption_band_then_page_minus_margins(self):
        geometry = PageGeometry(page_width=600, page_height=800, margin=50)

        assert geometry.content_width == 500
        assert geometry.content_height == 700

    def test_content_box_when_caption_band_then_only_height_reduced(self):
        geometry = PageGeometry(page_width=600, page_height=800, margin=50, caption_band=40)

        assert geometry.content_width == 500
        assert geometry.content_height == 660

    def test_init_when_margins_exceed_width_then_raises_error(self):
        with pytest.raises(ValueError, match="Margins exceed page width"):
            PageGeometry(page_width=100, page_height=800, margin=60)

    def test_page_dimensions_when_landscape_then_swapped(self):
        portrait = page_dimensions(RenderConfig(paper_size=PaperSize.LETTER))
        landscape = page_dimensions(
            RenderConfig(paper_size=PaperSize.LETTER, orientation=Orientation.LANDSCAPE)
        )

        assert portrait == pytest.approx(LETTER)
        assert landscape == pytest.approx((LETTER[1], LETTER[0]))

    def test_page_geometry_when_captions_enabled_then_band_reserved(self):
        with_captions = page_geometry(RenderConfig(include_captions=True))
        without = page_geometry(RenderConfig(include_captions=False))

        assert with_captions.page_width == pytest.approx(A4[0])
        assert with_captions.margin == pytest.approx(PAGE_MARGIN_PT)
        assert without.content_height - with_captions.content_height == pytest.approx(CAPTION_BAND_PT)
        assert without.content_width == with_captions.content_width
