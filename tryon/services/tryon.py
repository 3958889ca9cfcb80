"""
Try-on generation - two sequential Gemini calls per request.

  1. Analysis: describe the model image, focused on the category's body region.
  2. Edit:     composite the item onto the model, guided by that description.

Stage 2's instruction is built from stage 1's text, so the calls never overlap.
No retries: a failed attempt is reported and the caller may try again.
"""

import logging
from typing import Callable, Optional

from ..core.exceptions import InvalidImageInput, NoImageProduced, ServiceCallFailed
from ..models.generation import GenerationRequest, GenerationResult
from ..models.image import EncodedImage
from .catalogue import lookup
from .genai import GenAIService, ResponsePart, get_genai_service

logger = logging.getLogger(__name__)

STATUS_ANALYZING = "Analyzing model image..."
STATUS_GENERATING = "Generating final image..."

StatusCallback = Callable[[str], None]


def extract_image(parts: list[ResponsePart]) -> EncodedImage:
    """Return the first inline image among the response parts."""
    for part in parts:
        if part.has_image:
            return EncodedImage(data=part.data, content_type=part.mime_type or "")
    raise NoImageProduced("Could not find a generated image in the API response.")


async def _analyze(service: GenAIService, request: GenerationRequest, prompt: str) -> str:
    try:
        return await service.analyze_image(prompt, request.model_image)
    except Exception as e:
        raise ServiceCallFailed(str(e) or type(e).__name__, stage="analysis") from e


async def _edit(service: GenAIService, request: GenerationRequest, instruction: str) -> list[ResponsePart]:
    try:
        return await service.edit_image(instruction, [request.model_image, request.item_image])
    except Exception as e:
        raise ServiceCallFailed(str(e) or type(e).__name__, stage="generation") from e


async def generate(
    request: GenerationRequest,
    service: Optional[GenAIService] = None,
    on_status: Optional[StatusCallback] = None,
) -> GenerationResult:
    """
    Run analysis then edit for one request.

    Never raises for service or extraction failures: they come back as a
    failed GenerationResult. The caller is responsible for single-flight use.
    """
    service = service or get_genai_service()
    profile = lookup(request.category)

    def report(status: str) -> None:
        if on_status is not None:
            on_status(status)

    try:
        report(STATUS_ANALYZING)
        analysis_text = await _analyze(service, request, profile.analysis_prompt)
        logger.info("Analysis done for %s (%d chars)", profile.key.value, len(analysis_text))

        report(STATUS_GENERATING)
        instruction = profile.generation_prompt(analysis_text)
        parts = await _edit(service, request, instruction)

        image = extract_image(parts)
    except ServiceCallFailed as e:
        logger.error("Try-on %s failed during %s: %s", profile.key.value, e.stage, e)
        return GenerationResult.failure(e)
    except InvalidImageInput as e:
        # Edit stage returned inline data that is not an image
        logger.error("Try-on %s returned an unusable image: %s", profile.key.value, e)
        return GenerationResult.failure(e)
    except NoImageProduced as e:
        logger.warning("Try-on %s produced no image: %s", profile.key.value, e)
        return GenerationResult.failure(e)

    logger.info("Try-on %s complete: %d-byte %s", profile.key.value, image.size, image.content_type)
    return GenerationResult.success(image)
