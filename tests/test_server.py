"""Tests for the HTTP endpoints."""

import pytest
from fastapi.testclient import TestClient

from splitbill.receipt.config import load_config
from splitbill.receipt.errors import ExtractionError, VisionError
from splitbill.receipt.pipeline import ReceiptPipeline
from splitbill.receipt.server import CORS_HEADERS, create_app
from splitbill.receipt.vision import InterpreterBackend

IMAGE = "data:image/jpeg;base64,/9j/4AAQSkZJRg=="


class FailingExtractor:
    async def extract_text(self, image):
        raise ExtractionError("OCR API key is not configured")


class StubBackend(InterpreterBackend):
    def __init__(self, answer="Fried Rice 45.000,00\nEs Teh 8.000", error=None):
        self.answer = answer
        self.error = error

    async def complete(self, system, prompt, image=None):
        if self.error:
            raise self.error
        return self.answer


def make_client(backend):
    pipeline = ReceiptPipeline(backend, extractor=FailingExtractor())
    app = create_app(load_config(), pipeline=pipeline, backend=backend)
    return TestClient(app)


@pytest.fixture
def client():
    return make_client(StubBackend())


def assert_cors(response):
    for name, value in CORS_HEADERS.items():
        assert response.headers[name] == value


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.parametrize("path", ["/process-receipt", "/calculate-final-prices"])
def test_preflight(client, path):
    response = client.options(path)
    assert response.status_code == 200
    assert response.content == b""
    assert_cors(response)


def test_process_receipt(client):
    response = client.post("/process-receipt", json={"imageData": IMAGE})
    assert response.status_code == 200
    assert_cors(response)
    items = response.json()["items"]
    assert [(i["name"], i["price"]) for i in items] == [
        ("Fried Rice", 45000.0),
        ("Es Teh", 8000.0),
    ]
    assert all(i["assignedTo"] == [] for i in items)
    assert all(i["id"] for i in items)


def test_process_receipt_missing_image(client):
    response = client.post("/process-receipt", json={})
    assert response.status_code == 500
    assert response.json() == {"error": "No image data provided", "items": []}
    assert_cors(response)


def test_process_receipt_invalid_body(client):
    response = client.post(
        "/process-receipt",
        content=b"not json",
        headers={"content-type": "application/json"},
    )
    assert response.status_code == 500
    assert response.json()["items"] == []


def test_process_receipt_vision_failure():
    client = make_client(StubBackend(error=VisionError("service unavailable")))
    response = client.post("/process-receipt", json={"imageData": IMAGE})
    assert response.status_code == 500
    body = response.json()
    assert body["items"] == []
    assert "service unavailable" in body["error"]


def test_process_receipt_unreadable():
    client = make_client(StubBackend(answer="Sorry, I cannot read this."))
    response = client.post("/process-receipt", json={"imageData": IMAGE})
    assert response.status_code == 200
    assert response.json() == {"items": []}


def test_process_receipt_empty_vision_answer():
    client = make_client(StubBackend(answer=""))
    response = client.post("/process-receipt", json={"imageData": IMAGE})
    assert response.status_code == 200
    assert response.json() == {"items": []}


def test_calculate_final_prices():
    client = make_client(StubBackend(answer="Total: Rp 53.000"))
    response = client.post("/calculate-final-prices", json={"items": [
        {"id": "1", "name": "Nasi Goreng", "price": 45000, "assignedTo": []},
        {"id": "2", "name": "Es Teh", "price": 8000, "assignedTo": []},
    ]})
    assert response.status_code == 200
    assert_cors(response)
    assert response.json() == {
        "calculation": "Total: Rp 53.000",
        "total": 53000,
        "itemCount": 2,
    }


def test_calculate_final_prices_without_items(client):
    response = client.post("/calculate-final-prices", json={})
    assert response.status_code == 500
    assert response.json() == {
        "error": "No items provided",
        "calculation": "Error calculating final prices",
    }
