"""Claude API backend for receipt interpretation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..errors import VisionError
from . import InterpreterBackend

if TYPE_CHECKING:
    from ..payload import ImagePayload


class ClaudeBackend(InterpreterBackend):
    """Interpret receipts using Claude's vision capability."""

    def __init__(
        self,
        api_key: str = "",
        model: str = "claude-sonnet-4-5-20250929",
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
                "Anthropic API key is not configured. "
                "Check the config file or the ANTHROPIC_API_KEY environment variable."
            )

        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic SDK is required: pip install anthropic"
            ) from None

        content: list[dict] = []
        if image is not None:
            content.append(
                {
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": image.media_type,
                        "data": image.data,
                    },
                }
            )
        content.append({"type": "text", "text": prompt})

        client = anthropic.AsyncAnthropic(api_key=self._api_key)
        try:
            response = await client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                system=system,
                messages=[{"role": "user", "content": content}],
            )
        except anthropic.AnthropicError as e:
            raise VisionError(f"Claude request failed: {e}") from e

        if not response.content:
            raise VisionError("Claude returned no content")
        return response.content[0].text
