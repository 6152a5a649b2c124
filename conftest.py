"""Pytest fixtures for claimcheck tests."""

import io
from typing import Any, Callable, Dict, List, Optional, Union

import pytest
from PIL import Image

from claimcheck.utils.config import (
    DEFAULT_LOG_FORMAT,
    BedrockConfig,
    Config,
    LoggingConfig,
    ServerConfig,
    UploadConfig,
)
from claimcheck.utils.errors import BedrockAPIError, ErrorContext, ErrorType

TAG_DATETIME = 0x0132


class FakeBedrockClient:
    """Stands in for BedrockClient; replies are consumed in order."""

    def __init__(self, replies: Optional[List[Union[str, Exception]]] = None):
        self.replies = list(replies or [])
        self.calls: List[Dict[str, Any]] = []

    def queue(self, *replies: Union[str, Exception]) -> None:
        self.replies.extend(replies)

    def converse(self, messages, operation: str = "converse", **kwargs) -> Dict[str, Any]:
        self.calls.append({"messages": messages, "operation": operation})
        if not self.replies:
            raise AssertionError(f"No fake reply queued for {operation}")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return {"text": reply, "content": [{"text": reply}], "stop_reason": "end_turn", "usage": {}}

    def prompt(self, index: int = -1) -> str:
        """Text block of a recorded call."""
        content = self.calls[index]["messages"][0]["content"]
        return next(block["text"] for block in content if "text" in block)


def bedrock_failure(operation: str = "converse") -> BedrockAPIError:
    return BedrockAPIError(
        ErrorContext(
            error_type=ErrorType.BEDROCK_SERVICE_ERROR,
            message=f"Bedrock API error during {operation}: service unavailable"
        )
    )


def fenced(body: str) -> str:
    return f"Here is the result:\n```json\n{body}\n```"


def make_jpeg(captured_at: Optional[str] = None, size=(64, 48)) -> bytes:
    """Build a small JPEG, optionally carrying an EXIF DateTime tag."""
    image = Image.new("RGB", size, (180, 200, 220))
    buffer = io.BytesIO()
    if captured_at:
        exif = image.getexif()
        exif[TAG_DATETIME] = captured_at
        image.save(buffer, "JPEG", exif=exif)
    else:
        image.save(buffer, "JPEG")
    return buffer.getvalue()


def make_pdf(lines: List[str]) -> bytes:
    """Build a one-page PDF with one text line per entry."""
    from reportlab.pdfgen import canvas

    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer)
    y = 800
    for line in lines:
        pdf.drawString(72, y, line)
        y -= 18
    pdf.save()
    return buffer.getvalue()


CLAIMANT_LINES = [
    "WARRANTY CLAIM FORM",
    "Claimant Information:",
    "Name: John Smith",
    "Vehicle: 2019 Honda Civic LX",
    "Claim Date: 2024:05:10",
    "Claim Status: Approved",
    "Component: Alternator",
]

CLAIMANT_REPLY = fenced(
    '{"Name": "John Smith", "Vehicle Info": "2019 Honda Civic LX", '
    '"Claim Status": "Approved", "Claim Date": "2024:05:10", '
    '"Reason": "Failed within warranty period", "Items Covered": "Alternator"}'
)


@pytest.fixture
def fake_bedrock() -> FakeBedrockClient:
    return FakeBedrockClient()


@pytest.fixture
def config() -> Config:
    return Config(
        bedrock=BedrockConfig(
            endpoint_url="https://bedrock-runtime.test",
            model_id="test-model",
            api_key="test-key",
            region="us-east-1",
            timeout=5,
            max_tokens=512,
            temperature=0.0,
        ),
        server=ServerConfig(host="127.0.0.1", port=3000, cors_origins=["*"]),
        uploads=UploadConfig(max_file_size_mb=1),
        logging=LoggingConfig(level="DEBUG", format=DEFAULT_LOG_FORMAT, file=None),
    )


@pytest.fixture
def verifier(config, fake_bedrock):
    from claimcheck.verifier import ClaimVerifier

    return ClaimVerifier.from_config(config, bedrock_client=fake_bedrock)


@pytest.fixture
def client(config, verifier):
    from fastapi.testclient import TestClient

    from claimcheck.api import create_app

    with TestClient(create_app(config, verifier)) as test_client:
        yield test_client


@pytest.fixture
def jpeg_factory() -> Callable[..., bytes]:
    return make_jpeg


@pytest.fixture
def pdf_factory() -> Callable[[List[str]], bytes]:
    return make_pdf
