"""HTTP endpoints called by the bill-splitting app."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from .config import ReceiptConfig, load_config
from .pipeline import ReceiptPipeline
from .summary import summarize_prices
from .vision import create_backend

if TYPE_CHECKING:
    from .vision import InterpreterBackend

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def _json(body: dict, status_code: int = 200) -> JSONResponse:
    return JSONResponse(body, status_code=status_code, headers=CORS_HEADERS)


def _preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


async def _read_body(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        raise ValueError("Request body must be JSON") from None
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object")
    return body


def create_app(
    config: ReceiptConfig | None = None,
    pipeline: ReceiptPipeline | None = None,
    backend: InterpreterBackend | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    The pipeline and backend are created from config unless given.
    """
    config = config or load_config()
    backend = backend or create_backend(config)
    pipeline = pipeline or ReceiptPipeline.from_config(config)

    app = FastAPI(title="splitbill receipt service")

    @app.get("/health")
    async def health() -> JSONResponse:
        return _json({"status": "ok"})

    @app.options("/process-receipt")
    async def process_receipt_preflight() -> Response:
        return _preflight()

    @app.post("/process-receipt")
    async def process_receipt(request: Request) -> JSONResponse:
        try:
            body = await _read_body(request)
        except ValueError as e:
            return _json({"error": str(e), "items": []}, status_code=500)

        result = await pipeline.process(body.get("imageData") or "")
        return _json(result.to_dict(), status_code=result.status_code)

    @app.options("/calculate-final-prices")
    async def calculate_final_prices_preflight() -> Response:
        return _preflight()

    @app.post("/calculate-final-prices")
    async def calculate_final_prices(request: Request) -> JSONResponse:
        try:
            body = await _read_body(request)
            summary = await summarize_prices(
                body.get("items"),
                backend=backend,
                currency=config.summary.currency,
                thousands_separator=config.parser.thousands_separator,
                decimal_separator=config.parser.decimal_separator,
            )
        except Exception as e:
            logger.exception("Error calculating final prices")
            return _json(
                {
                    "error": str(e) or type(e).__name__,
                    "calculation": "Error calculating final prices",
                },
                status_code=500,
            )
        return _json(summary.to_dict())

    return app
