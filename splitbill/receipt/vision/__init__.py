"""Interpreter backend base class and factory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from ..errors import VisionError
from . import prompts

if TYPE_CHECKING:
    from ..config import ReceiptConfig
    from ..payload import ImagePayload


class InterpreterBackend(ABC):
    """Abstract base for multimodal chat-completion services."""

    @abstractmethod
    async def complete(
        self, system: str, prompt: str, image: ImagePayload | None = None
    ) -> str:
        """Send one system + user exchange and return the answer text.

        Raises:
            VisionError: If the service call fails.
        """
        ...

    async def interpret_text(self, text: str) -> str:
        """Turn OCR text into a JSON receipt interpretation."""
        return await self._answer(
            prompts.INTERPRET_SYSTEM, prompts.INTERPRET_USER.format(text=text)
        )

    async def read_image(self, image: ImagePayload) -> str:
        """Ask the model for items and final prices straight from the image.

        The answer is free-form text and not guaranteed to be JSON. An
        unreadable receipt gives an empty answer, which is returned as is.
        """
        answer = await self.complete(
            prompts.READ_IMAGE_SYSTEM, prompts.READ_IMAGE_USER, image
        )
        return answer or ""

    async def explain_prices(self, listing: str, currency: str = "Rp") -> str:
        return await self._answer(
            prompts.EXPLAIN_SYSTEM.format(currency=currency),
            prompts.EXPLAIN_USER.format(listing=listing),
        )

    async def _answer(
        self, system: str, prompt: str, image: ImagePayload | None = None
    ) -> str:
        answer = await self.complete(system, prompt, image)
        if not answer or not answer.strip():
            raise VisionError(f"{type(self).__name__} returned an empty answer")
        return answer


def create_backend(config: ReceiptConfig) -> InterpreterBackend:
    """Create an interpreter backend based on configuration."""
    itp = config.interpreter
    backend_name = itp.backend

    match backend_name:
        case "openai":
            from .openai_chat import OpenAIBackend

            return OpenAIBackend(
                api_key=itp.openai.api_key,
                model=itp.openai.model,
                max_tokens=itp.max_tokens,
                temperature=itp.temperature,
            )
        case "claude":
            from .claude import ClaudeBackend

            return ClaudeBackend(
                api_key=itp.claude.api_key,
                model=itp.claude.model,
                max_tokens=itp.max_tokens,
                temperature=itp.temperature,
            )
        case "gemini":
            from .gemini import GeminiBackend

            return GeminiBackend(
                api_key=itp.gemini.api_key,
                model=itp.gemini.model,
                max_tokens=itp.max_tokens,
                temperature=itp.temperature,
            )
        case _:
            raise ValueError(
                f"Unknown interpreter backend: {backend_name!r}  "
                f"(choose one of openai / claude / gemini)"
            )
