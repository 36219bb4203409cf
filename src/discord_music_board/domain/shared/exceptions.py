"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class UserInputError(DomainError):
    """Raised when a command cannot run in the current state (rendered to the user as-is)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="USER_INPUT_ERROR")


class NoMatchError(UserInputError):
    """Raised when no provider found a song for a query."""

    def __init__(self, query: str, message: str | None = None) -> None:
        super().__init__(message or f"No match for query '{query}'")
        self.code = "NO_MATCH"
        self.query = query


class ResolutionError(DomainError):
    """Raised when a provider lookup fails (network, extractor, ...)."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(message, code="RESOLUTION_ERROR")
        self.provider = provider


class VoiceConnectionError(DomainError):
    """Raised when joining a voice channel fails."""

    def __init__(self, channel_id: int | None, message: str | None = None) -> None:
        msg = message or f"Could not join voice channel '{channel_id}'"
        super().__init__(msg, code="VOICE_CONNECTION_ERROR")
        self.channel_id = channel_id


class PlaybackError(DomainError):
    """Raised when an output session fails while streaming a song."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message, code="PLAYBACK_ERROR")
        self.cause = cause


class PersistenceError(DomainError):
    """Raised when the settings store cannot be written or read."""

    def __init__(self, operation: str, message: str | None = None) -> None:
        msg = message or f"Settings store operation '{operation}' failed"
        super().__init__(msg, code="PERSISTENCE_ERROR")
        self.operation = operation
