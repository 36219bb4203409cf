"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from discord_music_board.domain.shared.constants import AudioConstants
from discord_music_board.domain.shared.types import NonEmptyStr, SeekSeconds


class ProviderKind(Enum):
    """Identifies the capability that resolved a song."""

    YOUTUBE = "youtube"
    DIRECT_LINK = "direct_link"

    def __str__(self) -> str:
        return self.value


class StreamFormat(Enum):
    """Decode profile handed to the voice connection.

    OPUS is the provider-native streaming format (YouTube), OGG_OPUS the generic one.
    """

    OPUS = "opus"
    OGG_OPUS = "ogg/opus"

    @classmethod
    def for_url(cls, url: str) -> StreamFormat:
        if any(host in url for host in AudioConstants.NATIVE_OPUS_HOSTS):
            return cls.OPUS
        return cls.OGG_OPUS


class LoopMode(Enum):
    """Loop mode of a music board.

    - OFF: no repeat
    - ONE: repeat the current song until changed
    - COUNT: repeat the current song ``loop_count`` more times
    - ALL: cycle the whole queue
    """

    OFF = "off"
    ONE = "one"
    COUNT = "count"
    ALL = "all"


class DisconnectReason(Enum):
    """Why a board's pending disconnect timer was started."""

    IDLE = "idle"
    ALONE = "alone"


class PlaySongOptions(BaseModel):
    """Per-song playback options (mutable: seek rewrites the offset)."""

    model_config = ConfigDict(validate_assignment=True)

    seek: SeekSeconds | None = None


class AudioStream(BaseModel):
    """A playable audio location returned by ``LinkableSong.get_stream``.

    Each call to ``get_stream`` yields a fresh instance; the voice connection opens a
    new decoder process per stream, so a finished stream is never replayed.
    """

    model_config = ConfigDict(frozen=True)

    location: NonEmptyStr
    http_headers: dict[str, str] = Field(default_factory=dict)
