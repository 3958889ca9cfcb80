"""
Generation request/result contracts. Transient, never persisted.
"""

from dataclasses import dataclass
from typing import Optional

from ..core.exceptions import TryOnError
from ..services.catalogue import Category
from .image import EncodedImage


@dataclass(frozen=True)
class GenerationRequest:
    category: Category
    model_image: EncodedImage
    item_image: EncodedImage


@dataclass
class GenerationResult:
    """Either a composite image or the error that ended the attempt."""

    image: Optional[EncodedImage] = None
    error: Optional[TryOnError] = None

    @property
    def succeeded(self) -> bool:
        return self.image is not None and self.error is None

    @property
    def message(self) -> str:
        """Human-readable error text ("" on success)."""
        if self.error is None:
            return ""
        return str(self.error) or "An unknown error occurred."

    @classmethod
    def success(cls, image: EncodedImage) -> "GenerationResult":
        return cls(image=image)

    @classmethod
    def failure(cls, error: TryOnError) -> "GenerationResult":
        return cls(error=error)
