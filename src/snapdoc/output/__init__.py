"""
Module: output

Purpose:
    PDF rendering and persistence.

Key Functions:
    - render(): Entries + RenderConfig -> DocumentArtifact
    - write_document(): Atomic write with a fixed file name

Dependencies:
    - reportlab: PDF generation
    - fitz (PyMuPDF): Written-file validation

Used By:
    - controller: Export pipeline
"""

from .renderer import DocumentArtifact, RenderError, render
from .writer import OUTPUT_FILENAME, write_document

__all__ = [
    "DocumentArtifact",
    "RenderError",
    "render",
    "OUTPUT_FILENAME",
    "write_document",
]
