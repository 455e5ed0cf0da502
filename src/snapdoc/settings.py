"""
Settings persistence for SnapDoc.

Stores the export toggles (captions, paper size, orientation), the last
output directory and the caption model in a JSON file. Malformed data
falls back to defaults and is reported through ``load_error``; reading
settings never raises.

Environment:
    OPENAI_API_KEY          Caption service credential (never stored)
    SNAPDOC_CAPTION_MODEL   Overrides the stored caption model
    SNAPDOC_DATA_DIR        Overrides the settings directory
"""
from __future__ import annotations

import json
import logging
import os
import platform
import tempfile
from pathlib import Path
from typing import Dict, Optional

from snapdoc.captions.adapter import API_KEY_ENV, DEFAULT_CAPTION_MODEL
from snapdoc.layout import Orientation, PaperSize, RenderConfig

logger = logging.getLogger(__name__)

APP_NAME = "SnapDoc"
SETTINGS_FILENAME = "settings.json"
DATA_DIR_ENV = "SNAPDOC_DATA_DIR"
CAPTION_MODEL_ENV = "SNAPDOC_CAPTION_MODEL"


def get_app_data_dir() -> Path:
    """
    Get the application data directory for settings.

    $SNAPDOC_DATA_DIR if set, otherwise the platform's per-user
    application data location.
    """
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override)
    system = platform.system()
    if system == "Windows":
        base = os.environ.get("LOCALAPPDATA", os.environ.get("APPDATA"))
        return Path(base) / APP_NAME if base else Path.home() / ".snapdoc"
    if system == "Darwin":
        return Path.home() / "Library/Application Support" / APP_NAME
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share")) / APP_NAME


def get_api_key() -> Optional[str]:
    """Caption service credential from the environment, or None."""
    return os.environ.get(API_KEY_ENV) or None


class SettingsStore:
    """Lightweight JSON-backed store for export preferences."""

    CURRENT_VERSION = 1

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else get_app_data_dir() / SETTINGS_FILENAME
        self.data: Dict[str, object] = {}
        self.load_error: Optional[str] = None

        if self.path.exists():
            try:
                loaded = json.loads(self.path.read_text(encoding="utf-8"))
                if not isinstance(loaded, dict):
                    raise ValueError(f"expected a JSON object, got {type(loaded).__name__}")
                self.data = loaded
            except json.JSONDecodeError as e:
                self.load_error = f"Settings file is corrupted: {e}"
            except (OSError, ValueError) as e:
                self.load_error = f"Failed to read settings: {e}"
            if self.load_error:
                logger.warning(f"{self.load_error} ({self.path}); using defaults")
                self.data = {}

        if "version" not in self.data:
            self.data["version"] = self.CURRENT_VERSION

    # ---- render configuration ----

    def get_render_config(self) -> RenderConfig:
        """Stored export toggles; each malformed value falls back to its default."""
        defaults = RenderConfig()

        include_captions = self.data.get("include_captions", defaults.include_captions)
        if not isinstance(include_captions, bool):
            logger.debug(f"Ignoring malformed include_captions: {include_captions!r}")
            include_captions = defaults.include_captions

        try:
            paper_size = PaperSize.parse(self.data.get("paper_size", defaults.paper_size))
        except ValueError as e:
            logger.debug(f"Ignoring stored paper size: {e}")
            paper_size = defaults.paper_size

        try:
            orientation = Orientation.parse(self.data.get("orientation", defaults.orientation))
        except ValueError as e:
            logger.debug(f"Ignoring stored orientation: {e}")
            orientation = defaults.orientation

        return RenderConfig(
            include_captions=include_captions,
            paper_size=paper_size,
            orientation=orientation,
        )

    def set_render_config(self, config: RenderConfig) -> None:
        self.data["include_captions"] = config.include_captions
        self.data["paper_size"] = config.paper_size.value
        self.data["orientation"] = config.orientation.value
        self.save()

    # ---- output directory ----

    def get_output_dir(self) -> Optional[Path]:
        value = self.data.get("output_dir")
        return Path(value) if isinstance(value, str) and value else None

    def set_output_dir(self, value: Path) -> None:
        self.data["output_dir"] = str(value)
        self.save()

    # ---- captions ----

    def get_caption_model(self) -> str:
        """Caption model: $SNAPDOC_CAPTION_MODEL, then stored value, then default."""
        override = os.environ.get(CAPTION_MODEL_ENV)
        if override:
            return override
        value = self.data.get("caption_model")
        return value if isinstance(value, str) and value.strip() else DEFAULT_CAPTION_MODEL

    def set_caption_model(self, value: str) -> None:
        self.data["caption_model"] = value
        self.save()

    # ---- persistence ----

    def save(self) -> None:
        """
        Write settings atomically.

        Failures are logged, not raised; preferences are not worth
        aborting an export over.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                suffix=".json",
                dir=self.path.parent,
                delete=False,
            ) as f:
                json.dump(self.data, f, indent=2)
                temp_path = Path(f.name)
            temp_path.replace(self.path)
            self.load_error = None
        except OSError as e:
            logger.error(f"Failed to save settings to {self.path}: {e}")
