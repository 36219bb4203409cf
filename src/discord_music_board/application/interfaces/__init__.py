"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from discord_music_board.application.interfaces.song_provider import SongProvider
from discord_music_board.application.interfaces.voice_adapter import (
    OutputSession,
    VoiceConnection,
    VoiceGateway,
)

__all__ = [
    "SongProvider",
    "OutputSession",
    "VoiceConnection",
    "VoiceGateway",
]
