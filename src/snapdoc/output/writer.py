"""
Module: output.writer

Purpose:
    Persist a rendered document as a single PDF with a fixed file name.
    The PDF is written to a temporary file beside the target, checked by
    reopening it with PyMuPDF, and only then renamed into place, so a
    partial or corrupt file is never left under the final name.

Key Functions:
    - write_document(): Atomic, verified write of a DocumentArtifact

Dependencies:
    - fitz (PyMuPDF): Post-write validation
    - tempfile (std): Temporary file in the target directory

Used By:
    - controller: Export pipeline
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

import fitz

from .renderer import DocumentArtifact, RenderError

logger = logging.getLogger(__name__)

OUTPUT_FILENAME = "snapdoc-converted.pdf"


def write_document(artifact: DocumentArtifact, output_dir: Path) -> Path:
    """
    Write the artifact to ``output_dir / OUTPUT_FILENAME``.

    An existing file with that name is replaced only after the new one
    has been fully written and validated.

    Args:
        artifact: Rendered document with at least one page
        output_dir: Destination directory (created if missing)

    Returns:
        Path of the written PDF

    Raises:
        RenderError: If the artifact is empty, or writing/validation fails

    Example:
        >>> write_document(artifact, Path("exports"))
        PosixPath('exports/snapdoc-converted.pdf')
    """
    if artifact.is_empty:
        raise RenderError("Nothing to write: the document has no pages")

    output_dir = Path(output_dir)
    target = output_dir / OUTPUT_FILENAME
    temp_path = None

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="wb",
            prefix=".snapdoc-",
            suffix=".pdf.part",
            dir=output_dir,
            delete=False,
        ) as f:
            temp_path = Path(f.name)
            f.write(artifact.pdf_bytes)

        _verify_pdf(temp_path, artifact.page_count)
        temp_path.replace(target)
    except RenderError:
        _discard(temp_path)
        raise
    except (OSError, RuntimeError, ValueError) as e:
        _discard(temp_path)
        raise RenderError(f"Failed to write {target}: {e}") from e

    logger.info(f"Wrote {artifact.page_count} pages to {target}")
    return target


def _verify_pdf(path: Path, expected_pages: int) -> None:
    """
    Reopen a written PDF and check its page count.

    Raises:
        RenderError: If the file cannot be parsed or has the wrong page count
    """
    try:
        with fitz.open(str(path)) as doc:
            page_count = doc.page_count
    except (RuntimeError, ValueError) as e:
        raise RenderError(f"Written PDF could not be reopened: {e}") from e

    if page_count != expected_pages:
        raise RenderError(f"Written PDF has {page_count} pages, expected {expected_pages}")


def _discard(path) -> None:
    if path is None:
        return
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not remove temporary file {path}: {e}")
