"""
Domain errors. Services raise these; the API layer maps them to HTTP codes.
"""


class TryOnError(Exception):
    """Base class for every try-on failure."""


class InvalidImageInput(TryOnError, ValueError):
    """A candidate upload is not a usable image."""


class ServiceCallFailed(TryOnError):
    """The AI service failed during the analysis or edit stage."""

    def __init__(self, message: str, stage: str = ""):
        super().__init__(message)
        self.stage = stage


class NoImageProduced(TryOnError):
    """The edit stage answered but returned no inline image."""


class UnknownCategory(TryOnError, KeyError):
    """Category is not in the catalogue (or is disabled)."""

    def __str__(self) -> str:
        # KeyError.__str__ wraps the message in quotes
        return str(self.args[0]) if self.args else ""


class SessionNotFound(TryOnError, KeyError):
    """No session is registered under the given id."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class SessionBusy(TryOnError):
    """A generation is already in flight for this session."""


class SessionNotReady(TryOnError):
    """Generation requested without both images present."""
