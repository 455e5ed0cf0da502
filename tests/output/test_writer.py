"""
Tests for atomic PDF persistence.
"""

from dataclasses import replace

import fitz
import pytest

from snapdoc.layout import RenderConfig
from snapdoc.output import OUTPUT_FILENAME, RenderError, render, write_document


@pytest.fixture
def artifact(entry_factory):
    return render([entry_factory(800, 600, caption="Sunset"), entry_factory(600, 800)], RenderConfig())


class TestWriteDocument:

    def test_writes_fixed_filename(self, artifact, tmp_path):
        path = write_document(artifact, tmp_path)

        assert path == tmp_path / OUTPUT_FILENAME
        assert path.name == "snapdoc-converted.pdf"
        with fitz.open(str(path)) as doc:
            assert doc.page_count == 2

    def test_creates_missing_directory(self, artifact, tmp_path):
        target_dir = tmp_path / "nested" / "exports"

        path = write_document(artifact, target_dir)

        assert path.exists()

    def test_when_file_exists_then_replaced(self, artifact, tmp_path):
        (tmp_path / OUTPUT_FILENAME).write_bytes(b"old export")

        path = write_document(artifact, tmp_path)

        assert path.read_bytes() == artifact.pdf_bytes
        assert list(tmp_path.iterdir()) == [path]

    def test_when_empty_artifact_then_raises_and_writes_nothing(self, tmp_path):
        empty = render([], RenderConfig())

        with pytest.raises(RenderError, match="no pages"):
            write_document(empty, tmp_path)

        assert list(tmp_path.iterdir()) == []

    def test_when_bytes_invalid_then_previous_file_kept_and_temp_removed(self, artifact, tmp_path):
        existing = tmp_path / OUTPUT_FILENAME
        existing.write_bytes(b"previous export")
        broken = replace(artifact, pdf_bytes=b"this is not a pdf")

        with pytest.raises(RenderError):
            write_document(broken, tmp_path)

        assert existing.read_bytes() == b"previous export"
        assert list(tmp_path.iterdir()) == [existing]

    def test_when_page_count_mismatch_then_raises(self, artifact, entry_factory, tmp_path):
        single = render([entry_factory()], RenderConfig())
        mismatched = replace(artifact, pdf_bytes=single.pdf_bytes)

        with pytest.raises(RenderError, match="expected 2"):
            write_document(mismatched, tmp_path)

        assert list(tmp_path.iterdir()) == []
