"""Core domain entities for the music bounded context."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel, ConfigDict, Field

from discord_music_board.domain.music.value_objects import (
    AudioStream,
    DisconnectReason,
    LoopMode,
    PlaySongOptions,
    ProviderKind,
    StreamFormat,
)
from discord_music_board.domain.shared.constants import AudioConstants
from discord_music_board.domain.shared.types import HttpUrlStr, NonEmptyStr, SongTitleStr

if TYPE_CHECKING:
    from discord_music_board.application.interfaces.voice_adapter import (
        OutputSession,
        VoiceConnection,
    )


class TextSink(Protocol):
    """Anything the board can post announcements to (a ``discord.TextChannel`` fits)."""

    id: int

    async def send(self, content: str) -> object: ...


class LinkableSong(BaseModel):
    """A resolved song reference that can lazily produce an audio stream."""

    model_config = ConfigDict(validate_assignment=True)

    query: NonEmptyStr
    title: SongTitleStr
    url: HttpUrlStr
    provider: ProviderKind
    options: PlaySongOptions = Field(default_factory=PlaySongOptions)
    stream_factory: Callable[[LinkableSong], Awaitable[AudioStream]] = Field(
        exclude=True, repr=False
    )

    @property
    def stream_format(self) -> StreamFormat:
        return StreamFormat.for_url(self.url)

    async def get_stream(self) -> AudioStream:
        """Produce a fresh stream for one playback; call again for every replay."""
        return await self.stream_factory(self)


@dataclass(eq=False)
class MusicBoard:
    """Per-guild playback state: queue, flags, loop mode, volume and timers.

    The board owns ``connection`` while it exists. ``playing`` is true exactly while an
    output session is alive (a paused session still counts as playing).
    """

    id: int
    text_channel: TextSink
    voice_channel_id: int
    connection: VoiceConnection
    volume: int = AudioConstants.DEFAULT_BOARD_VOLUME
    song_queue: list[LinkableSong] = field(default_factory=list)
    last_song_played: LinkableSong | None = None
    playing: bool = False
    paused: bool = False
    loop_mode: LoopMode = LoopMode.OFF
    loop_count: int = 0
    do_disconnect_immediately: bool = False
    disconnect_timer: asyncio.Task[None] | None = None
    disconnect_reason: DisconnectReason | None = None
    output_session: OutputSession | None = None
    driver: asyncio.Task[None] | None = None
    destroyed: bool = False
    persisted_volume: int | None = None

    @property
    def queue_length(self) -> int:
        return len(self.song_queue)

    @property
    def is_driving(self) -> bool:
        """True while a playback driver task is running for this board."""
        return self.driver is not None and not self.driver.done()

    @property
    def has_pending_disconnect(self) -> bool:
        return self.disconnect_timer is not None and not self.disconnect_timer.done()

    @property
    def looping(self) -> str:
        """Human readable loop mode: ``off``, ``one``, ``<n> more`` or ``all``."""
        if self.loop_mode is LoopMode.COUNT:
            return f"{self.loop_count} more" if self.loop_count > 0 else LoopMode.OFF.value
        return self.loop_mode.value

    def enqueue(self, song: LinkableSong) -> int:
        """Append a song and return its zero-based queue position."""
        self.song_queue.append(song)
        return len(self.song_queue) - 1

    def enqueue_next(self, song: LinkableSong) -> None:
        self.song_queue.insert(0, song)

    def dequeue(self) -> LinkableSong | None:
        if not self.song_queue:
            return None
        return self.song_queue.pop(0)

    def clear_queue(self) -> int:
        count = len(self.song_queue)
        self.song_queue.clear()
        return count

    def set_loop(self, count: int | None = None) -> None:
        """Repeat the current song forever (``count`` None) or ``count`` more times."""
        if count is None:
            self.loop_mode = LoopMode.ONE
            self.loop_count = 0
        else:
            self.loop_mode = LoopMode.COUNT
            self.loop_count = count

    def loop_all(self) -> None:
        self.loop_mode = LoopMode.ALL
        self.loop_count = 0

    def unloop(self) -> None:
        self.loop_mode = LoopMode.OFF
        self.loop_count = 0

    def start_disconnect_timer(self, timer: asyncio.Task[None], reason: DisconnectReason) -> None:
        """Replace any pending disconnect timer with ``timer``."""
        self.cancel_disconnect_timer()
        self.disconnect_timer = timer
        self.disconnect_reason = reason

    def cancel_disconnect_timer(self) -> bool:
        """Cancel the pending disconnect timer; a missing or finished timer is a no-op."""
        timer = self.disconnect_timer
        self.disconnect_timer = None
        self.disconnect_reason = None
        if timer is None or timer.done():
            return False
        if timer is asyncio.current_task():
            return False
        timer.cancel()
        return True

    def advance(self) -> LinkableSong | None:
        """Apply the loop policy after a song finished and dequeue the next one.

        A repeat re-inserts the last song at the front, ahead of anything queued
        meanwhile. Queue looping appends it to the back after the dequeue. While the
        immediate-disconnect latch is set nothing comes next, whatever is queued.
        """
        self.playing = False
        self.paused = False
        self.output_session = None

        if self.do_disconnect_immediately:
            return None

        last = self.last_song_played
        if last is not None:
            repeat_count = self.loop_mode is LoopMode.COUNT and self.loop_count > 0
            if self.loop_mode is LoopMode.ONE or repeat_count:
                self.enqueue_next(last)
                if self.loop_mode is LoopMode.COUNT:
                    self.loop_count -= 1

        next_song = self.dequeue()

        if self.loop_mode is LoopMode.ALL and last is not None:
            self.enqueue(last)
            if next_song is None:
                # Single-song queue: the song just requeued is the next one.
                next_song = self.dequeue()

        return next_song
