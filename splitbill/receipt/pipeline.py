"""Receipt ingestion pipeline: image in, normalized line items out."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .errors import ExtractionError, PipelineError, VisionError
from .models import Interpretation, InterpretationSource, LineItem, ReceiptResponse
from .ocr import create_extractor
from .parser import ReceiptParser
from .payload import ImagePayload
from .reconcile import reconcile_result
from .vision import create_backend

if TYPE_CHECKING:
    from .config import ReceiptConfig
    from .ocr import TextExtractor
    from .vision import InterpreterBackend

logger = logging.getLogger(__name__)


class ReceiptPipeline:
    """Runs OCR → interpretation → parsing → fee reconciliation.

    OCR is tried first. If it fails, finds no text, or the model cannot
    interpret its text, the model reads the image directly instead. Each
    external service is called at most once per receipt and the pipeline
    keeps no state between receipts.
    """

    def __init__(
        self,
        interpreter: InterpreterBackend,
        extractor: TextExtractor | None = None,
        parser: ReceiptParser | None = None,
    ) -> None:
        self._interpreter = interpreter
        self._extractor = extractor
        self._parser = parser or ReceiptParser()

    @classmethod
    def from_config(cls, config: ReceiptConfig) -> ReceiptPipeline:
        return cls(
            interpreter=create_backend(config),
            extractor=create_extractor(config),
            parser=ReceiptParser.from_config(config),
        )

    async def interpret(self, image: ImagePayload) -> Interpretation:
        """Get a model answer for the receipt, via OCR text or the image.

        Raises:
            PipelineError: If the vision fallback fails as well.
        """
        if self._extractor is not None:
            try:
                text = await self._extractor.extract_text(image)
                response = await self._interpreter.interpret_text(text)
                return Interpretation(InterpretationSource.OCR, response)
            except (ExtractionError, VisionError) as e:
                logger.warning("OCR path failed, falling back to vision: %s", e)

        try:
            response = await self._interpreter.read_image(image)
        except VisionError as e:
            raise PipelineError(f"Could not read the receipt: {e}") from e
        return Interpretation(InterpretationSource.VISION, response)

    async def run(self, image_data: str | ImagePayload) -> list[LineItem]:
        """Process one receipt image into line items.

        Raises:
            ValueError: If no image data is given.
            PipelineError: If neither OCR nor the vision fallback worked.
        """
        image = (
            image_data
            if isinstance(image_data, ImagePayload)
            else ImagePayload.from_data(image_data)
        )
        interpretation = await self.interpret(image)
        logger.info("Receipt interpreted via %s", interpretation.source.value)

        result = self._parser.parse(interpretation.response)
        items = reconcile_result(result)
        logger.info(
            "Extracted %d item(s) and %d fee(s)", len(items), len(result.fees)
        )
        return items

    async def process(self, image_data: str | ImagePayload) -> ReceiptResponse:
        """Like ``run`` but never raises; failures become an error response."""
        try:
            items = await self.run(image_data)
        except Exception as e:
            logger.exception("Error processing receipt")
            return ReceiptResponse(items=[], error=str(e) or type(e).__name__)
        return ReceiptResponse(items=items)
