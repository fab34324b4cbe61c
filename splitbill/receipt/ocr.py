"""OCR text extraction for receipt images."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import httpx

from .config import DEFAULT_OCR_ENDPOINT
from .errors import ExtractionError

if TYPE_CHECKING:
    from .config import ReceiptConfig
    from .payload import ImagePayload

logger = logging.getLogger(__name__)


class TextExtractor(ABC):
    """Abstract base for receipt text extraction."""

    @abstractmethod
    async def extract_text(self, image: ImagePayload) -> str:
        """Return the full text of the receipt.

        Raises:
            ExtractionError: If the service fails or finds no text.
        """
        ...


class GoogleVisionTextExtractor(TextExtractor):
    """Extract receipt text with the Cloud Vision TEXT_DETECTION feature.

    One request per call, never retried; the pipeline decides what to do
    on failure.
    """

    def __init__(
        self,
        api_key: str = "",
        endpoint: str = DEFAULT_OCR_ENDPOINT,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._endpoint = endpoint
        self._timeout = timeout
        self._client = client

    async def extract_text(self, image: ImagePayload) -> str:
        if not self._api_key:
            raise ExtractionError("OCR API key is not configured")

        body = {
            "requests": [
                {
                    "image": {"content": image.data},
                    "features": [{"type": "TEXT_DETECTION"}],
                }
            ]
        }

        try:
            if self._client is not None:
                response = await self._client.post(
                    self._endpoint, params={"key": self._api_key}, json=body
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(
                        self._endpoint, params={"key": self._api_key}, json=body
                    )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise ExtractionError(
                f"OCR service error: {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise ExtractionError(f"OCR request failed: {e}") from e
        except ValueError as e:
            raise ExtractionError(f"OCR response is not JSON: {e}") from e

        text = _full_text(data)
        if not text.strip():
            raise ExtractionError("OCR returned no text")
        logger.debug("OCR extracted %d characters", len(text))
        return text


def _full_text(data: dict) -> str:
    """Pick the best full-text annotation out of an annotate response."""
    if not isinstance(data, dict):
        return ""
    responses = data.get("responses")
    if not (
        isinstance(responses, list) and responses and isinstance(responses[0], dict)
    ):
        return ""

    first = responses[0]
    error = first.get("error")
    if error:
        message = error.get("message", "") if isinstance(error, dict) else error
        raise ExtractionError(f"OCR service error: {message}")

    full = first.get("fullTextAnnotation") or {}
    text = full.get("text") if isinstance(full, dict) else None
    if isinstance(text, str) and text:
        return text

    annotations = first.get("textAnnotations")
    if isinstance(annotations, list) and annotations and isinstance(annotations[0], dict):
        description = annotations[0].get("description")
        return description if isinstance(description, str) else ""
    return ""


def create_extractor(config: ReceiptConfig) -> TextExtractor | None:
    """Create the OCR extractor, or None when OCR is disabled."""
    if not config.ocr.enabled:
        return None
    return GoogleVisionTextExtractor(
        api_key=config.ocr.api_key,
        endpoint=config.ocr.endpoint,
        timeout=config.ocr.timeout,
    )
