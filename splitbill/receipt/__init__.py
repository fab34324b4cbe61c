"""Receipt ingestion: receipt image to priced, shareable line items."""

from .config import ReceiptConfig, load_config
from .errors import ExtractionError, PipelineError, ReceiptError, VisionError
from .models import (
    EntryType,
    Interpretation,
    InterpretationSource,
    LineItem,
    ParseResult,
    RawEntry,
    ReceiptResponse,
)
from .ocr import GoogleVisionTextExtractor, TextExtractor, create_extractor
from .parser import ReceiptParser, StructuredPayload, UnstructuredText, decode_response
from .payload import ImagePayload
from .pipeline import ReceiptPipeline
from .reconcile import reconcile
from .summary import PriceSummary, summarize_prices
from .vision import InterpreterBackend, create_backend

__all__ = [
    "ReceiptPipeline",
    "ReceiptParser",
    "StructuredPayload",
    "UnstructuredText",
    "decode_response",
    "reconcile",
    "ImagePayload",
    "TextExtractor",
    "GoogleVisionTextExtractor",
    "create_extractor",
    "InterpreterBackend",
    "create_backend",
    "PriceSummary",
    "summarize_prices",
    "EntryType",
    "RawEntry",
    "ParseResult",
    "LineItem",
    "Interpretation",
    "InterpretationSource",
    "ReceiptResponse",
    "ReceiptError",
    "ExtractionError",
    "VisionError",
    "PipelineError",
    "ReceiptConfig",
    "load_config",
]
