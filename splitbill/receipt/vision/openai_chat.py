"""OpenAI chat-completion backend for receipt interpretation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..errors import VisionError
from . import InterpreterBackend

if TYPE_CHECKING:
    from ..payload import ImagePayload


class OpenAIBackend(InterpreterBackend):
    """Interpret receipts with an OpenAI vision-capable chat model."""

    def __init__(
        self,
        api_key: str = "",
        model: str = "gpt-4o",
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
                "OpenAI API key is not configured. "
                "Check the config file or the OPENAI_API_KEY environment variable."
            )

        try:
            import openai
        except ImportError:
            raise ImportError(
                "openai SDK is required: pip install openai"
            ) from None

        if image is None:
            user_content: str | list[dict] = prompt
        else:
            user_content = [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": image.data_url}},
            ]

        client = openai.AsyncOpenAI(api_key=self._api_key)
        try:
            response = await client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user_content},
                ],
                max_tokens=self._max_tokens,
                temperature=self._temperature,
            )
        except openai.OpenAIError as e:
            raise VisionError(f"OpenAI request failed: {e}") from e

        if not response.choices:
            raise VisionError("OpenAI returned no choices")
        return response.choices[0].message.content or ""
