"""
Module: captions.adapter

Purpose:
    Request a short caption for an image from a vision model.
    Adapters are constructed explicitly and injected into whatever needs
    them; there is no module-level client.

Key Classes:
    - CaptionAdapter: Abstract caption source
    - OpenAICaptionAdapter: OpenAI chat-completions implementation
    - CaptionError: Base failure
    - MissingCredentialError: No API key configured (no request attempted)
    - CaptionServiceError: Network, remote or malformed-response failure

Dependencies:
    - openai: Chat completions with image input
    - PIL: Re-encoding formats the API does not accept

Used By:
    - captions.service: Asynchronous caption requests
    - cli: --auto-caption
"""

from __future__ import annotations

import base64
import io
import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Optional

from openai import OpenAI, OpenAIError
from PIL import Image, UnidentifiedImageError

from snapdoc.collection.models import ImageBlob

logger = logging.getLogger(__name__)

API_KEY_ENV = "OPENAI_API_KEY"
DEFAULT_CAPTION_MODEL = "gpt-4o-mini"
FALLBACK_CAPTION = "No caption generated."
CAPTION_PROMPT = (
    "Analyze this image and provide a clear, concise, professional caption "
    "(max 20 words) suitable for a PDF document. Do not include phrases like "
    "'This image shows'. Just the description."
)
MAX_CAPTION_TOKENS = 100

# Content types accepted as-is in data URLs; anything else is sent as PNG
_DIRECT_MIME_TYPES = frozenset({"image/png", "image/jpeg", "image/gif", "image/webp"})


class CaptionError(Exception):
    """Caption acquisition failed."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class MissingCredentialError(CaptionError):
    """No API key is configured for the caption service."""


class CaptionServiceError(CaptionError):
    """The caption service could not be reached or returned an unusable response."""


class CaptionAdapter(ABC):
    """
    Abstract caption source.

    Implementations return the caption verbatim (trimmed), substitute
    FALLBACK_CAPTION for an empty response, and never retry.
    """

    @abstractmethod
    def request_caption(self, blob: ImageBlob) -> str:
        """
        Caption one image.

        Args:
            blob: Image bytes and MIME type

        Returns:
            Trimmed, non-empty caption text

        Raises:
            MissingCredentialError: If no credential is configured
            CaptionServiceError: On network, remote or parse failure
        """


class OpenAICaptionAdapter(CaptionAdapter):
    """
    Caption adapter backed by the OpenAI chat completions API.

    The image is sent inline as a base64 data URL. The client is created
    lazily on the first request, after the credential check, so a missing
    key never reaches the network.

    Example:
        >>> adapter = OpenAICaptionAdapter(api_key=os.environ["OPENAI_API_KEY"])
        >>> adapter.request_caption(ImageBlob(data, "image/jpeg", "beach.jpg"))
        'Waves breaking on a quiet beach at sunset'
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        model: str = DEFAULT_CAPTION_MODEL,
        client: Optional[Any] = None,
        timeout: float = 60.0,
    ):
        """
        Args:
            api_key: API key; falls back to $OPENAI_API_KEY
            model: Vision-capable chat model
            client: Pre-built OpenAI client (tests)
            timeout: Request timeout in seconds
        """
        self.api_key = api_key if api_key is not None else os.environ.get(API_KEY_ENV, "")
        self.model = model
        self.timeout = timeout
        self._client = client

    @property
    def has_credential(self) -> bool:
        return self._client is not None or bool(self.api_key)

    def request_caption(self, blob: ImageBlob) -> str:
        if not self.has_credential:
            raise MissingCredentialError(
                f"API key is missing: set {API_KEY_ENV} to enable AI captions"
            )

        image_url = _to_data_url(blob)

        try:
            client = self._get_client()
            response = client.chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": CAPTION_PROMPT},
                            {"type": "image_url", "image_url": {"url": image_url}},
                        ],
                    }
                ],
                max_tokens=MAX_CAPTION_TOKENS,
            )
        except OpenAIError as e:
            logger.error(f"Caption request failed for {blob.name or '<unnamed>'}: {e}")
            raise CaptionServiceError(f"Failed to generate caption: {e}") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise CaptionServiceError(f"Malformed caption response: {e}") from e

        if content is not None and not isinstance(content, str):
            raise CaptionServiceError(f"Malformed caption response: {type(content).__name__} content")

        caption = (content or "").strip()
        if not caption:
            logger.info(f"Empty caption response for {blob.name or '<unnamed>'}, using fallback")
            return FALLBACK_CAPTION
        return caption

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        return self._client


def _to_data_url(blob: ImageBlob) -> str:
    """
    Encode a blob as a data URL the API accepts.

    Raises:
        CaptionServiceError: If the image must be re-encoded but cannot be decoded
    """
    mime_type = blob.mime_type.strip().lower()
    if mime_type == "image/jpg":
        mime_type = "image/jpeg"
    data = blob.data

    if mime_type not in _DIRECT_MIME_TYPES:
        try:
            with Image.open(io.BytesIO(data)) as img:
                if img.mode not in ("RGB", "RGBA", "L", "LA", "P"):
                    img = img.convert("RGB")
                buf = io.BytesIO()
                img.save(buf, format="PNG")
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise CaptionServiceError(f"Cannot encode {blob.name or 'image'} for captioning: {e}") from e
        data = buf.getvalue()
        mime_type = "image/png"

    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"
