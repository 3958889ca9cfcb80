"""
Generative-AI service boundary. Gemini OR offline mock. Controlled by FF_USE_GEMINI.

Two capabilities:
  - analyze_image: multimodal text generation (prompt + one image → text)
  - edit_image:    multimodal image editing (instruction + images → parts)

The google-genai SDK is synchronous, so every call runs in a worker thread
via asyncio.to_thread to keep the event loop free.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ..core.config import get_settings
from ..core.flags import get_flags
from ..models.image import EncodedImage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResponsePart:
    """One content part of an edit response: text or inline image data."""

    text: Optional[str] = None
    mime_type: Optional[str] = None
    data: Optional[bytes] = None

    @property
    def has_image(self) -> bool:
        return bool(self.data)


class GenAIService(ABC):
    @abstractmethod
    async def analyze_image(self, prompt: str, image: EncodedImage) -> str:
        """Describe an image. Returns free-form text."""
        ...

    @abstractmethod
    async def edit_image(self, instruction: str, images: list[EncodedImage]) -> list[ResponsePart]:
        """Edit/composite images. Returns the response parts in order."""
        ...


# ── Gemini ───────────────────────────────────────────────────────────

_gemini_client = None


def _get_gemini_client():
    """Lazy-load and cache the google-genai client as a singleton.

    The client must stay referenced: once it is garbage-collected its
    internal httpx connection closes and in-flight requests fail.
    """
    global _gemini_client
    if _gemini_client is not None:
        return _gemini_client
    from google import genai

    settings = get_settings()
    api_key = settings.gemini_api_key
    if not api_key:
        raise ValueError("GEMINI_API_KEY is required for try-on generation")
    _gemini_client = genai.Client(api_key=api_key)
    return _gemini_client


def _image_part(image: EncodedImage):
    from google.genai import types
    return types.Part(inline_data=types.Blob(mime_type=image.content_type, data=image.data))


class GeminiService(GenAIService):
    def __init__(self, analysis_model: str = "", generation_model: str = ""):
        settings = get_settings()
        self.analysis_model = analysis_model or settings.analysis_model
        self.generation_model = generation_model or settings.generation_model

    # ── Sync functions (run in a thread) ─────────────────────────────

    def _sync_analyze(self, prompt: str, image: EncodedImage) -> str:
        client = _get_gemini_client()
        response = client.models.generate_content(
            model=self.analysis_model,
            contents=[prompt, _image_part(image)],
        )
        return response.text or ""

    def _sync_edit(self, instruction: str, images: list[EncodedImage]) -> list[ResponsePart]:
        from google.genai import types

        client = _get_gemini_client()
        response = client.models.generate_content(
            model=self.generation_model,
            contents=[instruction, *(_image_part(img) for img in images)],
            config=types.GenerateContentConfig(
                response_modalities=["IMAGE", "TEXT"],
            ),
        )

        parts = []
        candidates = response.candidates or []
        if not candidates or candidates[0].content is None:
            return parts

        for part in candidates[0].content.parts or []:
            if part.inline_data is not None and part.inline_data.data:
                parts.append(ResponsePart(
                    mime_type=part.inline_data.mime_type,
                    data=part.inline_data.data,
                ))
            elif part.text is not None:
                parts.append(ResponsePart(text=part.text))
        return parts

    # ── Async API ────────────────────────────────────────────────────

    async def analyze_image(self, prompt: str, image: EncodedImage) -> str:
        logger.debug("Gemini analyze (%s): %d-byte %s", self.analysis_model, image.size, image.content_type)
        return await asyncio.to_thread(self._sync_analyze, prompt, image)

    async def edit_image(self, instruction: str, images: list[EncodedImage]) -> list[ResponsePart]:
        logger.debug("Gemini edit (%s): %d image(s)", self.generation_model, len(images))
        return await asyncio.to_thread(self._sync_edit, instruction, images)


# ── Offline mock ─────────────────────────────────────────────────────

class MockGenAIService(GenAIService):
    """No network. Describes nothing and echoes the first image back."""

    ANALYSIS_TEXT = "A person standing facing the camera in even studio lighting."

    async def analyze_image(self, prompt: str, image: EncodedImage) -> str:
        return self.ANALYSIS_TEXT

    async def edit_image(self, instruction: str, images: list[EncodedImage]) -> list[ResponsePart]:
        first = images[0]
        return [
            ResponsePart(text="Mock composite (FF_USE_GEMINI is off)."),
            ResponsePart(mime_type=first.content_type, data=first.data),
        ]


def get_genai_service() -> GenAIService:
    """Return the active AI service based on feature flags."""
    flags = get_flags()
    if flags.use_gemini:
        return GeminiService()
    logger.info("FF_USE_GEMINI is off, using mock AI service")
    return MockGenAIService()
