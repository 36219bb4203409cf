"""DTOs for the music application service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.entities import TextSink


@dataclass(frozen=True)
class MusicContext:
    """Who asked for what, where: the part of a chat command the engine needs.

    ``voice_channel_id`` is the invoking member's current voice channel, or None when
    the member is not connected to voice.
    """

    guild_id: int
    text_channel: TextSink
    user_id: int
    user_name: str
    voice_channel_id: int | None = None

    @property
    def in_voice(self) -> bool:
        return self.voice_channel_id is not None
