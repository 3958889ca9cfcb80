"""
Shared fixtures: a scriptable stand-in for the AI service and sample images.
"""

import asyncio

import pytest

from tryon.core.flags import get_flags
from tryon.models.image import EncodedImage
from tryon.services.genai import GenAIService, ResponsePart
from tryon.services.session import clear_sessions


class StubService(GenAIService):
    """Records every call; behaviour is set through constructor arguments."""

    def __init__(
        self,
        analysis: str = "T",
        parts=None,
        analysis_error: Exception = None,
        edit_error: Exception = None,
        delay: float = 0,
    ):
        self.analysis = analysis
        self.parts = parts
        self.analysis_error = analysis_error
        self.edit_error = edit_error
        self.delay = delay
        self.analyze_calls = []
        self.edit_calls = []

    async def analyze_image(self, prompt, image):
        self.analyze_calls.append((prompt, image))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.analysis_error is not None:
            raise self.analysis_error
        return self.analysis

    async def edit_image(self, instruction, images):
        self.edit_calls.append((instruction, list(images)))
        if self.edit_error is not None:
            raise self.edit_error
        if self.parts is not None:
            return self.parts
        if self.analysis in instruction:
            return [
                ResponsePart(text="Here is your image."),
                ResponsePart(mime_type="image/png", data=b"ABC"),
            ]
        return [ResponsePart(text="Instruction did not carry the analysis.")]


@pytest.fixture
def make_stub():
    return StubService


@pytest.fixture
def stub():
    return StubService()


@pytest.fixture
def model_image():
    return EncodedImage(data=b"model-bytes", content_type="image/jpeg")


@pytest.fixture
def item_image():
    return EncodedImage(data=b"item-bytes", content_type="image/png")


@pytest.fixture(autouse=True)
def _reset_state():
    """Fresh flags and an empty session registry for every test."""
    get_flags.cache_clear()
    clear_sessions()
    yield
    get_flags.cache_clear()
    clear_sessions()


@pytest.fixture
def accessories_disabled(monkeypatch):
    monkeypatch.setenv("FF_ENABLE_ACCESSORIES", "false")
    get_flags.cache_clear()
    yield
    get_flags.cache_clear()
