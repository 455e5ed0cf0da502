"""
Tests for the snapdoc command line front end.
"""

from unittest.mock import patch

import fitz
import pytest

from snapdoc import cli
from snapdoc.output import OUTPUT_FILENAME
from snapdoc.settings import SettingsStore


@pytest.fixture
def images(tmp_path, image_bytes):
    """Two images plus a text file on disk."""
    src = tmp_path / "src"
    src.mkdir()
    (src / "one.png").write_bytes(image_bytes(80, 60, "PNG"))
    (src / "two.jpg").write_bytes(image_bytes(60, 80, "JPEG"))
    (src / "notes.txt").write_text("not an image")
    return src


@pytest.fixture
def run(tmp_path, monkeypatch):
    """Run the CLI with an isolated settings file and output directory."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("SNAPDOC_CAPTION_MODEL", raising=False)
    settings_path = tmp_path / "settings.json"
    out_dir = tmp_path / "out"

    def _run(*args):
        return cli.main(["--settings", str(settings_path), "-o", str(out_dir), *map(str, args)])

    _run.settings_path = settings_path
    _run.out_dir = out_dir
    return _run


class TestMain:

    def test_when_images_then_pdf_written_and_path_printed(self, run, images, capsys):
        code = run(images / "one.png", images / "two.jpg", "--caption", "First page")

        assert code == 0
        output = run.out_dir / OUTPUT_FILENAME
        assert capsys.readouterr().out.strip() == str(output)
        with fitz.open(str(output)) as doc:
            assert doc.page_count == 2
            assert "First page" in doc[0].get_text()

    def test_when_non_images_mixed_in_then_skipped(self, run, images):
        code = run(images / "notes.txt", images / "one.png", images / "missing.png")

        assert code == 0
        with fitz.open(str(run.out_dir / OUTPUT_FILENAME)) as doc:
            assert doc.page_count == 1

    def test_when_no_usable_images_then_exit_code_1(self, run, images):
        assert run(images / "notes.txt") == 1
        assert not (run.out_dir / OUTPUT_FILENAME).exists()

    def test_when_letter_landscape_then_page_size(self, run, images):
        run(images / "one.png", "--paper", "letter", "--orientation", "landscape", "--no-captions")

        with fitz.open(str(run.out_dir / OUTPUT_FILENAME)) as doc:
            assert doc[0].rect.width > doc[0].rect.height

    def test_when_unknown_paper_then_usage_error(self, run, images):
        with pytest.raises(SystemExit) as exc_info:
            run(images / "one.png", "--paper", "legal")

        assert exc_info.value.code == 2

    def test_save_defaults_persists_choices(self, run, images):
        run(images / "one.png", "--paper", "letter", "--no-captions", "--save-defaults")

        config = SettingsStore(run.settings_path).get_render_config()
        assert config.include_captions is False
        assert config.paper_size.value == "letter"
        assert SettingsStore(run.settings_path).get_output_dir() == run.out_dir

    def test_when_auto_caption_without_key_then_still_exports(self, run, images, caplog):
        with patch("snapdoc.captions.adapter.OpenAI") as mock_openai:
            code = run(images / "one.png", "--auto-caption")

        assert code == 0
        mock_openai.assert_not_called()
        assert "API key is missing" in caplog.text

    def test_when_auto_caption_with_key_then_captions_rendered(self, run, images, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

        with patch.object(cli.OpenAICaptionAdapter, "request_caption", return_value="Generated caption"):
            code = run(images / "one.png", "--auto-caption")

        assert code == 0
        with fitz.open(str(run.out_dir / OUTPUT_FILENAME)) as doc:
            assert "Generated caption" in doc[0].get_text()


class TestVersion:

    def test_version_flag_prints_package_version(self, capsys):
        from snapdoc import __version__

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--version"])

        assert exc_info.value.code == 0
        assert capsys.readouterr().out.strip() == f"snapdoc {__version__}"
        assert __version__ != "0.0.0"
