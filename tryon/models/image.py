"""
In-memory encoded image, ready to submit to the AI service.
"""

import base64
import binascii
import mimetypes
from dataclasses import dataclass

from ..core.exceptions import InvalidImageInput

IMAGE_PREFIX = "image/"

# mimetypes maps image/jpeg to ".jpe" on some platforms
_PREFERRED_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}


@dataclass(frozen=True)
class EncodedImage:
    """Raw image bytes plus their media type."""

    data: bytes
    content_type: str

    def __post_init__(self):
        if not isinstance(self.content_type, str) or not self.content_type.startswith(IMAGE_PREFIX):
            raise InvalidImageInput(
                f"Please upload a valid image file (got content type {self.content_type!r})."
            )
        if not self.data:
            raise InvalidImageInput("Image payload is empty.")

    def __repr__(self) -> str:
        return f"EncodedImage(content_type={self.content_type!r}, size={len(self.data)})"

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        """File extension for downloads (".png", ".jpg", ...)."""
        ext = _PREFERRED_EXTENSIONS.get(self.content_type)
        if ext:
            return ext
        return mimetypes.guess_extension(self.content_type) or ".img"

    @classmethod
    def from_base64(cls, payload: str, content_type: str) -> "EncodedImage":
        """Decode a raw base64 string."""
        try:
            # Line-wrapped base64 (base64 CLI, encodebytes) is accepted
            data = base64.b64decode("".join(payload.split()), validate=True)
        except (binascii.Error, ValueError):
            raise InvalidImageInput("Invalid base64 image data.")
        return cls(data=data, content_type=content_type)

    @classmethod
    def from_data_url(cls, url: str, content_type: str = "") -> "EncodedImage":
        """
        Decode a data URL (data:image/png;base64,...).

        Plain base64 is accepted too when content_type is given.
        """
        raw = url.strip()
        if raw.startswith("data:"):
            header, _, payload = raw.partition(",")
            if not payload or ";base64" not in header:
                raise InvalidImageInput("Data URL must be base64 encoded.")
            content_type = header[len("data:"):].split(";", 1)[0]
            return cls.from_base64(payload, content_type)
        if not content_type:
            raise InvalidImageInput("Content type is required for raw base64 uploads.")
        return cls.from_base64(raw, content_type)

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("utf-8")

    def to_data_url(self) -> str:
        """Render as a data URL for direct display in the browser."""
        return f"data:{self.content_type};base64,{self.to_base64()}"
