"""Top-level package for SnapDoc.

Provides subpackages:
- snapdoc.collection – ordered page entries, ingestion and edit commands
- snapdoc.captions – AI caption adapter and the pending-flag service
- snapdoc.layout – page geometry and pagination (pure)
- snapdoc.output – PDF rendering and atomic persistence
"""

import re
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

DISTRIBUTION = "snapdoc"

# Source checkout layout: src/snapdoc/__init__.py -> pyproject.toml
_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"
_VERSION_LINE = re.compile(r"""^version\s*=\s*["']([^"']+)["']""", re.MULTILINE)


def _get_version() -> str:
    """Installed distribution version, else the one in a source checkout, else 0.0.0."""
    try:
        return version(DISTRIBUTION)
    except PackageNotFoundError:
        pass
    try:
        match = _VERSION_LINE.search(_PYPROJECT.read_text(encoding="utf-8"))
    except OSError:
        return "0.0.0"
    return match.group(1) if match else "0.0.0"


__version__ = _get_version()
__all__ = ["__version__"]
