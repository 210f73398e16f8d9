"""Pytest configuration and shared fixtures."""

import base64
import json
from io import BytesIO
from typing import AsyncGenerator, List, Union

import httpx
import pytest
from PIL import Image

from kidcreatives.providers import GeminiClient
from kidcreatives.core import ImageGenerator, QuestionGenerator, VisionAnalyzer
from kidcreatives.utils.config import Config


class FakeGemini:
    """Stands in for the Gemini API behind an httpx.MockTransport.

    Responses are served in the order queued; an exception in the queue is
    raised instead, which is how network failures are simulated.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.responses: List[Union[httpx.Response, Exception]] = []

    def queue(self, *responses: Union[httpx.Response, Exception]):
        self.responses.extend(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            return httpx.Response(500, json={"error": {"message": "nothing queued"}})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def request_json(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)

    def request_parts(self, index: int = -1) -> list:
        return self.request_json(index)["contents"][0]["parts"]


def text_response(text: str) -> httpx.Response:
    return httpx.Response(
        200,
        json={"candidates": [{"content": {"parts": [{"text": text}]}}]},
    )


def image_response(data: str = "aW1hZ2U=", mime_type: str = "image/png") -> httpx.Response:
    inline = {"data": data}
    if mime_type:
        inline["mimeType"] = mime_type
    return httpx.Response(
        200,
        json={
            "candidates": [{
                "content": {"parts": [
                    {"text": "Here is your picture!"},
                    {"inlineData": inline},
                ]}
            }]
        },
    )


def make_png_b64(size=(8, 8), color="red") -> str:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("utf-8")


@pytest.fixture
def fake_gemini() -> FakeGemini:
    return FakeGemini()


@pytest.fixture
async def gemini_client(fake_gemini) -> AsyncGenerator[GeminiClient, None]:
    """Create and initialize a Gemini client wired to the fake API."""
    client = GeminiClient(
        api_key="test-key",
        transport=httpx.MockTransport(fake_gemini.handler),
    )
    await client.initialize()
    yield client
    await client.close()


@pytest.fixture
def question_generator(gemini_client) -> QuestionGenerator:
    return QuestionGenerator(gemini_client)


@pytest.fixture
def image_generator(gemini_client) -> ImageGenerator:
    return ImageGenerator(gemini_client)


@pytest.fixture
def vision_analyzer(gemini_client) -> VisionAnalyzer:
    return VisionAnalyzer(gemini_client)


@pytest.fixture
def test_config() -> Config:
    return Config(gemini_api_key="test-key", question_count=2)


@pytest.fixture
def drawing_b64() -> str:
    """A tiny valid PNG standing in for the child's drawing."""
    return make_png_b64()


@pytest.fixture
def sample_intent() -> str:
    return "A robot doing a backflip"
