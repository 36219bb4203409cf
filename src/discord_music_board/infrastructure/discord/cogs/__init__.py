"""Discord cogs - command handlers."""

from discord_music_board.infrastructure.discord.cogs.music_cog import MusicCog
from discord_music_board.infrastructure.discord.cogs.voice_event_cog import VoiceEventCog

__all__ = [
    "MusicCog",
    "VoiceEventCog",
]
