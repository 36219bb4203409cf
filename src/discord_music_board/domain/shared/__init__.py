"""
Shared Domain Kernel

Contains the exceptions and message catalogues shared by every layer.
"""

from discord_music_board.domain.shared.exceptions import (
    DomainError,
    NoMatchError,
    PersistenceError,
    PlaybackError,
    ResolutionError,
    UserInputError,
    VoiceConnectionError,
)

__all__ = [
    "DomainError",
    "UserInputError",
    "NoMatchError",
    "ResolutionError",
    "VoiceConnectionError",
    "PlaybackError",
    "PersistenceError",
]
