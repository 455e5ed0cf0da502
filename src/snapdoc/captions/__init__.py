"""
Module: captions

Purpose:
    AI caption acquisition: an injectable adapter contract with error
    translation, and a background service that keeps each entry's
    pending flag accurate.

Key Classes:
    - CaptionAdapter / OpenAICaptionAdapter
    - CaptionService / CaptionOutcome
    - CaptionError, MissingCredentialError, CaptionServiceError

Dependencies:
    - openai: Vision chat completions

Used By:
    - cli: --auto-caption
"""

from .adapter import (
    DEFAULT_CAPTION_MODEL,
    FALLBACK_CAPTION,
    CaptionAdapter,
    CaptionError,
    CaptionServiceError,
    MissingCredentialError,
    OpenAICaptionAdapter,
)
from .service import CaptionOutcome, CaptionService

__all__ = [
    "DEFAULT_CAPTION_MODEL",
    "FALLBACK_CAPTION",
    "CaptionAdapter",
    "OpenAICaptionAdapter",
    "CaptionError",
    "MissingCredentialError",
    "CaptionServiceError",
    "CaptionService",
    "CaptionOutcome",
]
