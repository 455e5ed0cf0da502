import io
import sys
import uuid
from pathlib import Path

import pytest
from PIL import Image

# Add src to sys.path so we can import snapdoc
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from snapdoc.collection.models import ImageBlob, ImageData, PageEntry, PreviewHandle


def encode_image(width: int, height: int, fmt: str = "PNG", color: str = "white", **save_kwargs) -> bytes:
    """Encode a solid-colour test image."""
    img = Image.new("RGB", (width, height), color=color)
    buf = io.BytesIO()
    img.save(buf, format=fmt, **save_kwargs)
    return buf.getvalue()


# Common test fixtures
@pytest.fixture
def image_bytes():
    """Factory for encoded image bytes in any Pillow format."""
    def _create(width: int = 80, height: int = 60, fmt: str = "PNG", color: str = "white") -> bytes:
        return encode_image(width, height, fmt, color=color)
    return _create


@pytest.fixture
def png_bytes(image_bytes):
    """Factory for PNG bytes of a given size."""
    def _create(width: int = 80, height: int = 60, color: str = "white") -> bytes:
        return image_bytes(width, height, "PNG", color=color)
    return _create


@pytest.fixture
def png_blob(png_bytes):
    """Factory for image/png blobs."""
    def _create(width: int = 80, height: int = 60, name: str = "image.png") -> ImageBlob:
        return ImageBlob(data=png_bytes(width, height), mime_type="image/png", name=name)
    return _create


@pytest.fixture
def entry_factory(png_bytes):
    """
    Factory for PageEntry objects with arbitrary declared dimensions.

    The embedded image is a small real PNG, so entries can be rendered;
    the declared width/height drive the layout.
    """
    def _create(width: int = 800, height: int = 600, caption: str = "", name: str = "") -> PageEntry:
        data = png_bytes(max(width, 1) // 10 or 1, max(height, 1) // 10 or 1)
        blob = ImageBlob(data=data, mime_type="image/png", name=name or f"{width}x{height}.png")
        preview = PreviewHandle(Image.new("RGB", (16, 16)))
        return PageEntry(
            id=uuid.uuid4().hex,
            image_data=ImageData(blob=blob, preview=preview),
            width=width,
            height=height,
            caption=caption,
        )
    return _create


@pytest.fixture
def sample_image(tmp_path: Path):
    """Create a simple test image on disk."""
    img = Image.new("RGB", (200, 100), color="white")
    img_path = tmp_path / "sample.png"
    img.save(img_path)
    return img_path
