"""
Unit tests for settings persistence.
"""

import json

import pytest

from snapdoc.captions import DEFAULT_CAPTION_MODEL
from snapdoc.layout import Orientation, PaperSize, RenderConfig
from snapdoc.settings import (
    CAPTION_MODEL_ENV,
    DATA_DIR_ENV,
    SETTINGS_FILENAME,
    SettingsStore,
    get_api_key,
    get_app_data_dir,
)


@pytest.fixture
def settings_path(tmp_path, monkeypatch):
    monkeypatch.delenv(CAPTION_MODEL_ENV, raising=False)
    return tmp_path / "settings.json"


class TestSettingsStore:
    """Test settings persistence."""

    def test_when_no_file_then_defaults(self, settings_path):
        store = SettingsStore(settings_path)

        assert store.get_render_config() == RenderConfig()
        assert store.get_output_dir() is None
        assert store.get_caption_model() == DEFAULT_CAPTION_MODEL
        assert store.load_error is None
        assert not settings_path.exists()

    def test_render_config_persistence(self, settings_path):
        config = RenderConfig(
            include_captions=False,
            paper_size=PaperSize.LETTER,
            orientation=Orientation.LANDSCAPE,
        )
        SettingsStore(settings_path).set_render_config(config)

        # New instance reads from disk
        assert SettingsStore(settings_path).get_render_config() == config
        stored = json.loads(settings_path.read_text())
        assert stored["paper_size"] == "letter"
        assert stored["orientation"] == "landscape"

    def test_output_dir_and_model_persistence(self, settings_path, tmp_path):
        store = SettingsStore(settings_path)
        store.set_output_dir(tmp_path / "exports")
        store.set_caption_model("gpt-4o")

        reloaded = SettingsStore(settings_path)
        assert reloaded.get_output_dir() == tmp_path / "exports"
        assert reloaded.get_caption_model() == "gpt-4o"

    def test_when_file_corrupted_then_defaults_and_load_error(self, settings_path):
        settings_path.write_text("{not json")

        store = SettingsStore(settings_path)

        assert store.load_error is not None
        assert "corrupted" in store.load_error
        assert store.get_render_config() == RenderConfig()

    def test_when_file_not_object_then_defaults(self, settings_path):
        settings_path.write_text("[1, 2, 3]")

        store = SettingsStore(settings_path)

        assert "JSON object" in store.load_error
        assert store.get_render_config() == RenderConfig()

    def test_when_values_malformed_then_each_falls_back(self, settings_path):
        settings_path.write_text(json.dumps({
            "include_captions": "yes",
            "paper_size": "legal",
            "orientation": "landscape",
            "output_dir": 42,
        }))

        store = SettingsStore(settings_path)

        config = store.get_render_config()
        assert config.include_captions is True
        assert config.paper_size is PaperSize.A4
        assert config.orientation is Orientation.LANDSCAPE
        assert store.get_output_dir() is None

    def test_save_clears_load_error(self, settings_path):
        settings_path.write_text("{not json")
        store = SettingsStore(settings_path)

        store.set_render_config(RenderConfig())

        assert store.load_error is None
        assert json.loads(settings_path.read_text())["version"] == SettingsStore.CURRENT_VERSION


class TestEnvironment:

    def test_caption_model_env_overrides_stored(self, settings_path, monkeypatch):
        store = SettingsStore(settings_path)
        store.set_caption_model("stored-model")
        monkeypatch.setenv(CAPTION_MODEL_ENV, "env-model")

        assert store.get_caption_model() == "env-model"

    def test_data_dir_env_overrides_default_location(self, tmp_path, monkeypatch):
        monkeypatch.setenv(DATA_DIR_ENV, str(tmp_path))

        assert get_app_data_dir() == tmp_path
        assert SettingsStore().path == tmp_path / SETTINGS_FILENAME

    def test_api_key_empty_is_none(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "")
        assert get_api_key() is None

        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        assert get_api_key() == "sk-test"
