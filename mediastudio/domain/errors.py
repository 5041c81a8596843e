"""Errors surfaced by the client core.

Every error carries a message that is safe to show to the user as-is.
"""
from __future__ import annotations


class StudioError(Exception):
    """Base class for recoverable, user-visible failures."""

    default_message = "An unknown error occurred."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(StudioError):
    """Input rejected before any request is sent."""

    default_message = "The request is missing required input."


class AuthError(StudioError):
    default_message = "Your session has expired. Please sign in again."


class ProviderRefusal(StudioError):
    """The provider answered but returned no artifact."""

    default_message = (
        "The AI did not return an image. It might have refused the request. "
        "Please try a different prompt."
    )

    def __init__(self, message: str | None = None, text: str | None = None) -> None:
        super().__init__(message)
        self.text = text


class TransportError(StudioError):
    default_message = "Could not reach the server. Please check your connection and try again."

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class JobFailure(StudioError):
    default_message = "Video generation failed. Please try again."
