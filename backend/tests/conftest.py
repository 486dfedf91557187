"""
Shared pytest fixtures and configuration for all tests
"""
import base64
import io
import json
import pytest
import sys
from pathlib import Path

import httpx
from PIL import Image

# Add backend to Python path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))


@pytest.fixture(autouse=True)
def no_server_api_key(monkeypatch):
    """Tests start without a server-side key; set one explicitly where needed"""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)


@pytest.fixture
def server_api_key(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "server-test-key")
    return "server-test-key"


def encode_test_png(width: int = 8, height: int = 6, color: int = 128) -> str:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), (color, color, color)).save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


@pytest.fixture
def png_b64():
    """Factory for small base64 PNGs of a given size"""
    return encode_test_png


def gemini_response(parts):
    return {"candidates": [{"content": {"role": "model", "parts": parts}}]}


@pytest.fixture
def image_response():
    """Factory for a generateContent answer carrying inline images (plus optional text)"""
    def build(images, text=None):
        parts = [{"text": text}] if text else []
        parts.extend({"inlineData": {"mimeType": "image/png", "data": data}} for data in images)
        return gemini_response(parts)
    return build


@pytest.fixture
def text_response():
    """Factory for a generateContent answer carrying a single text part"""
    def build(text):
        return gemini_response([{"text": text}])
    return build


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request and returns a fixed JSON answer"""

    def __init__(self, status_code=200, json_body=None):
        self.requests = []
        self.status_code = status_code
        self.json_body = json_body if json_body is not None else {}
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.json_body)

    @property
    def last_payload(self):
        return json.loads(self.requests[-1].content)


@pytest.fixture
def recording_transport():
    return RecordingTransport
