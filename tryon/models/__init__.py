"""
Data contracts shared by the services and the API.
"""

from .image import EncodedImage
from .generation import GenerationRequest, GenerationResult

__all__ = [
    "EncodedImage",
    "GenerationRequest", "GenerationResult",
]
