"""Port interfaces for voice connections and audio output sessions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.value_objects import AudioStream, StreamFormat


class OutputSession(ABC):
    """One song being streamed into a voice connection.

    Completion is exposed as an awaitable instead of ``finish``/``error`` callbacks.
    """

    @abstractmethod
    async def wait_finished(self) -> None:
        """Wait until the song ends (naturally or through ``end``).

        Raises:
            PlaybackError: If the output failed while streaming.
        """
        ...

    @abstractmethod
    def end(self) -> None:
        """Stop output; ``wait_finished`` then returns as for a natural finish."""
        ...

    @abstractmethod
    def set_volume_logarithmic(self, value: float) -> None:
        """Apply a gain where 1.0 is unity, on a logarithmic curve."""
        ...

    @abstractmethod
    def pause(self) -> None:
        ...

    @abstractmethod
    def resume(self) -> None:
        ...


class VoiceConnection(ABC):
    """An established voice session in one guild."""

    @abstractmethod
    async def play(
        self,
        stream: AudioStream,
        *,
        stream_format: StreamFormat,
        seek: int | None = None,
    ) -> OutputSession:
        """Start outputting *stream*, optionally from *seek* seconds."""
        ...

    @abstractmethod
    async def leave(self) -> None:
        """Leave the voice channel and release the connection."""
        ...


class VoiceGateway(ABC):
    """Interface for joining Discord voice channels."""

    @abstractmethod
    async def join(self, guild_id: int, channel_id: int) -> VoiceConnection:
        """Join a voice channel.

        Raises:
            VoiceConnectionError: If the channel cannot be joined.
        """
        ...
