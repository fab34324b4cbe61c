"""Exceptions raised by the receipt ingestion pipeline."""

from __future__ import annotations


class ReceiptError(RuntimeError):
    """Base class for receipt pipeline errors."""


class ExtractionError(ReceiptError):
    """OCR text extraction failed or returned no text."""


class VisionError(ReceiptError):
    """A multimodal model call failed."""


class PipelineError(ReceiptError):
    """Both the OCR path and the vision fallback were exhausted."""
