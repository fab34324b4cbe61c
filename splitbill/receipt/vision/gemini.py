"""Gemini API backend for receipt interpretation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..errors import VisionError
from . import InterpreterBackend

if TYPE_CHECKING:
    from ..payload import ImagePayload


class GeminiBackend(InterpreterBackend):
    """Interpret receipts using Google Gemini's vision capability."""

    def __init__(
        self,
        api_key: str = "",
        model: str = "gemini-2.0-flash",
        max_tokens: int = 1000,
        temperature: float = 0.1,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    async def complete(
        self, system: str, prompt: str, image: ImagePayload | None = None
    ) -> str:
        if not self._api_key:
            raise VisionError(
                "Gemini API key is not configured. "
                "Check the config file or the GEMINI_API_KEY environment variable."
            )

        try:
            import google.generativeai as genai
        except ImportError:
            raise ImportError(
                "google-generativeai SDK is required: pip install google-generativeai"
            ) from None

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(self._model, system_instruction=system)

        parts: list = []
        if image is not None:
            try:
                parts.append(
                    {"mime_type": image.media_type, "data": image.to_bytes()}
                )
            except ValueError as e:
                raise VisionError(str(e)) from e
        parts.append(prompt)

        try:
            response = await model.generate_content_async(
                parts,
                generation_config={
                    "max_output_tokens": self._max_tokens,
                    "temperature": self._temperature,
                },
            )
            return response.text
        except Exception as e:
            # The SDK raises google.api_core errors as well as ValueError
            # when the answer was blocked.
            raise VisionError(f"Gemini request failed: {e}") from e
