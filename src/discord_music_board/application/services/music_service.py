"""Music Board engine - drives per-guild playback through its state machine."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine, Iterable
from typing import TYPE_CHECKING, Any

from ...domain.music.entities import MusicBoard
from ...domain.music.registry import MusicBoardRegistry
from ...domain.music.value_objects import DisconnectReason, LoopMode, ProviderKind
from ...domain.shared.constants import AudioConstants, LimitConstants, TimeConstants
from ...domain.shared.exceptions import (
    NoMatchError,
    PersistenceError,
    PlaybackError,
    ResolutionError,
    UserInputError,
    VoiceConnectionError,
)
from ...domain.shared.messages import DiscordUIMessages, LogTemplates
from ...utils.reply import parse_timestamp, truncate

if TYPE_CHECKING:
    from ...domain.music.entities import LinkableSong
    from ...domain.music.repository import MusicSettingsRepository
    from ..interfaces.voice_adapter import OutputSession, VoiceGateway
    from .music_models import MusicContext
    from .song_resolver import SongResolver

logger = logging.getLogger(__name__)


class MusicService:
    """Owns the music boards of every guild and drives their playback.

    Each board with something to play gets one driver task. The driver starts a song,
    waits for its output session to finish, applies the loop policy through
    ``MusicBoard.advance`` and starts the next song, until the queue runs dry. Commands
    only mutate board state and end the current output session; the driver is the one
    place that starts songs, so playback on a board is strictly sequential.

    Command methods return the reply to show the user and raise ``UserInputError`` for
    anything the user has to fix. Announcements the engine makes on its own go to the
    board's text channel.
    """

    def __init__(
        self,
        *,
        resolver: SongResolver,
        voice_gateway: VoiceGateway,
        settings_repository: MusicSettingsRepository,
        registry: MusicBoardRegistry | None = None,
        disconnect_timeout_s: float = TimeConstants.DEFAULT_IDLE_DISCONNECT,
        alone_disconnect_timeout_s: float = TimeConstants.DEFAULT_ALONE_DISCONNECT,
        default_volume: int = AudioConstants.DEFAULT_BOARD_VOLUME,
        max_volume: int = AudioConstants.MAX_BOARD_VOLUME,
        seek_blacklist: Iterable[ProviderKind] = (ProviderKind.YOUTUBE,),
    ) -> None:
        self._resolver = resolver
        self._voice_gateway = voice_gateway
        self._settings_repo = settings_repository
        self._registry = registry if registry is not None else MusicBoardRegistry()
        self._disconnect_timeout_s = disconnect_timeout_s
        self._alone_disconnect_timeout_s = alone_disconnect_timeout_s
        self._default_volume = default_volume
        self._max_volume = max_volume
        self._seek_blacklist = frozenset(seek_blacklist)

        # Strong references so fire-and-forget persistence tasks are not collected.
        self._background_tasks: set[asyncio.Task[Any]] = set()

    @property
    def registry(self) -> MusicBoardRegistry:
        return self._registry

    def get_music_board(self, context: MusicContext) -> MusicBoard | None:
        """Board of the context's guild, visible only to members connected to voice."""
        if not context.in_voice:
            return None
        return self._registry.get(context.guild_id)

    def has_pending_disconnect(self, guild_id: int) -> bool:
        board = self._registry.get(guild_id)
        return board is not None and board.has_pending_disconnect

    # ─────────────────────────────────────────────────────────────────
    # Play
    # ─────────────────────────────────────────────────────────────────

    async def play(
        self,
        query: str,
        context: MusicContext,
        *,
        force_provider: ProviderKind | None = None,
    ) -> str | None:
        """Resolve ``query`` and start it, or queue it behind the current song.

        Returns None without doing anything when the member is not in a voice channel.

        Raises:
            NoMatchError: The provider found nothing for ``query``.
            ResolutionError: The provider lookup failed.
            VoiceConnectionError: The voice channel could not be joined.
        """
        if context.voice_channel_id is None:
            return None

        song = await self._resolver.resolve(query, context, force_provider=force_provider)
        if song is None:
            raise NoMatchError(query, DiscordUIMessages.PLAY_NO_MATCH.format(query=query))

        board = await self._board_after_teardown(context.guild_id)
        if board is not None:
            return self._add_to_board(board, song)

        connection = await self._voice_gateway.join(context.guild_id, context.voice_channel_id)

        # Another play may have created the board while we were joining.
        board = await self._board_after_teardown(context.guild_id)
        if board is not None:
            return self._add_to_board(board, song)

        board = self._registry.create(
            MusicBoard(
                id=context.guild_id,
                text_channel=context.text_channel,
                voice_channel_id=context.voice_channel_id,
                connection=connection,
                volume=self._default_volume,
            )
        )
        self._start_driver(board, song)
        return DiscordUIMessages.PLAY_STARTED.format(title=song.title)

    async def play_last_played_song(self, context: MusicContext) -> str | None:
        """Play again whatever was last played from this text channel."""
        if context.voice_channel_id is None:
            return None

        try:
            query = await self._settings_repo.get_last_song_played(
                context.guild_id, context.text_channel.id
            )
        except PersistenceError:
            logger.exception(LogTemplates.SETTINGS_PERSIST_FAILED, context.guild_id)
            query = None

        if not query:
            raise UserInputError(DiscordUIMessages.LAST_PLAYED_NONE)
        return await self.play(query, context)

    async def _board_after_teardown(self, guild_id: int) -> MusicBoard | None:
        """Board of ``guild_id``, once a teardown already requested for it has finished.

        A board whose latch is set only lives until its driver sees the current song
        stop, so a new song goes to the board created after it instead.
        """
        board = self._registry.get(guild_id)
        while board is not None and board.do_disconnect_immediately and board.is_driving:
            logger.info(LogTemplates.BOARD_TEARDOWN_AWAITED, guild_id)
            await asyncio.wait({board.driver})
            board = self._registry.get(guild_id)
        return board

    def _add_to_board(self, board: MusicBoard, song: LinkableSong) -> str:
        if board.is_driving:
            board.enqueue(song)
            logger.info(LogTemplates.SONG_QUEUED, song.title, board.id, board.queue_length)
            return DiscordUIMessages.PLAY_QUEUED.format(title=song.title)

        # Idle board: waiting on its disconnect timer or stopped after a playback error.
        if board.cancel_disconnect_timer():
            logger.info(LogTemplates.DISCONNECT_TIMER_CANCELLED, board.id)
        board.do_disconnect_immediately = False
        board.enqueue(song)
        next_song = board.dequeue()
        assert next_song is not None
        self._start_driver(board, next_song)
        return DiscordUIMessages.PLAY_STARTED.format(title=next_song.title)

    # ─────────────────────────────────────────────────────────────────
    # Playback driver
    # ─────────────────────────────────────────────────────────────────

    def _start_driver(self, board: MusicBoard, song: LinkableSong) -> None:
        board.driver = asyncio.create_task(self._drive(board, song), name=f"music-board-{board.id}")

    async def _drive(self, board: MusicBoard, song: LinkableSong) -> None:
        current: LinkableSong | None = song
        try:
            while current is not None:
                try:
                    session = await self._play_song(current, board)
                    if session is None:
                        return
                    await session.wait_finished()
                except (PlaybackError, ResolutionError) as exc:
                    await self._on_playback_error(board, current, exc)
                    return

                logger.debug(LogTemplates.SONG_FINISHED, current.title, board.id)
                current = board.advance()

            await self._on_queue_exhausted(board)
        except Exception:
            logger.exception(LogTemplates.DRIVER_CRASHED, board.id)
            board.playing = False
            board.paused = False
            board.output_session = None

    async def _play_song(self, song: LinkableSong, board: MusicBoard) -> OutputSession | None:
        """Start outputting ``song`` on the board's connection.

        Returns None when the board was torn down while the stream was being prepared.
        """
        if board.cancel_disconnect_timer():
            logger.info(LogTemplates.DISCONNECT_TIMER_CANCELLED, board.id)

        board.last_song_played = song
        self._spawn(self._record_song_played(board, song))

        stream = await song.get_stream()
        if board.destroyed:
            return None

        session = await board.connection.play(
            stream, stream_format=song.stream_format, seek=song.options.seek
        )
        if board.destroyed:
            session.end()
            return None

        board.output_session = session
        board.playing = True
        board.paused = False
        self.set_volume(board, board.volume)

        logger.info(LogTemplates.SONG_STARTED, song.title, board.id)
        return session

    async def _on_playback_error(
        self, board: MusicBoard, song: LinkableSong, error: PlaybackError | ResolutionError
    ) -> None:
        board.playing = False
        board.paused = False
        board.output_session = None
        logger.error(LogTemplates.PLAYBACK_FAILED, song.title, board.id, error.message)

        if board.do_disconnect_immediately:
            await self.leave_and_clear_music_board(board)
            return

        await self._notify(
            board, DiscordUIMessages.PLAYBACK_FAILED.format(title=song.title, error=error.message)
        )

    async def _on_queue_exhausted(self, board: MusicBoard) -> None:
        if board.do_disconnect_immediately:
            await self.leave_and_clear_music_board(board)
            return

        logger.info(LogTemplates.QUEUE_EXHAUSTED, board.id, self._disconnect_timeout_s)
        board.start_disconnect_timer(
            asyncio.create_task(
                self._disconnect_after_idle(board), name=f"music-board-idle-{board.id}"
            ),
            DisconnectReason.IDLE,
        )

    async def _disconnect_after_idle(self, board: MusicBoard) -> None:
        await asyncio.sleep(self._disconnect_timeout_s)
        board.cancel_disconnect_timer()
        logger.info(LogTemplates.IDLE_TIMEOUT_REACHED, board.id)
        await self.leave_and_clear_music_board(board)

    # ─────────────────────────────────────────────────────────────────
    # Teardown
    # ─────────────────────────────────────────────────────────────────

    async def leave_and_clear_music_board(self, board: MusicBoard) -> None:
        """Leave voice and forget the board.

        While a song is playing the teardown is deferred: the latch is set, the queue is
        cleared and the output is ended, and the driver tears the board down once the
        song has actually stopped.
        """
        if board.playing:
            logger.info(LogTemplates.BOARD_TEARDOWN_DEFERRED, board.id)
            board.do_disconnect_immediately = True
            board.clear_queue()
            if board.output_session is not None:
                board.output_session.end()
            return

        if board.cancel_disconnect_timer():
            logger.info(LogTemplates.DISCONNECT_TIMER_CANCELLED, board.id)
        if board.destroyed:
            return
        board.destroyed = True

        driver = board.driver
        if driver is not None and not driver.done() and driver is not asyncio.current_task():
            driver.cancel()

        if self._registry.get(board.id) is board:
            self._registry.remove(board.id)

        try:
            await board.connection.leave()
        except VoiceConnectionError:
            logger.exception(LogTemplates.VOICE_LEAVE_FAILED, board.id)

    async def shutdown(self) -> None:
        """Tear every board down immediately, e.g. when the bot closes."""
        for board in self._registry.all():
            board.playing = False
            if board.output_session is not None:
                board.output_session.end()
            await self.leave_and_clear_music_board(board)

        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)

    # ─────────────────────────────────────────────────────────────────
    # Volume
    # ─────────────────────────────────────────────────────────────────

    def set_volume(self, of: MusicBoard | MusicContext | int, volume: int) -> bool:
        """Apply ``volume`` to the live output of a board and persist it if it changed.

        ``of`` is a board, a command context or a guild id. Returns False when there is
        no output session to apply the volume to.
        """
        if isinstance(of, MusicBoard):
            board: MusicBoard | None = of
        elif isinstance(of, int):
            board = self._registry.get(of)
        else:
            board = self.get_music_board(of)

        if board is None or board.output_session is None:
            return False

        board.output_session.set_volume_logarithmic(volume / AudioConstants.VOLUME_LOG)
        board.volume = volume

        if volume != board.persisted_volume:
            previous = board.persisted_volume
            board.persisted_volume = volume
            self._spawn(self._persist_volume(board, volume, previous))
        return True

    async def change_volume(self, context: MusicContext, volume: int) -> str:
        if not 0 <= volume <= self._max_volume:
            raise UserInputError(
                DiscordUIMessages.VOLUME_OUT_OF_RANGE.format(max_volume=self._max_volume)
            )
        if not self.set_volume(context, volume):
            raise UserInputError(DiscordUIMessages.VOLUME_NOTHING_PLAYING)
        return DiscordUIMessages.VOLUME_SET.format(volume=volume)

    # ─────────────────────────────────────────────────────────────────
    # Skip / seek / loop / disconnect
    # ─────────────────────────────────────────────────────────────────

    def _require_playing(self, context: MusicContext, message: str) -> MusicBoard:
        board = self.get_music_board(context)
        if board is None or not board.playing or board.output_session is None:
            raise UserInputError(message)
        return board

    async def skip(self, context: MusicContext) -> str:
        board = self._require_playing(context, DiscordUIMessages.SKIP_NOTHING_PLAYING)

        was_last = board.queue_length == 0
        if was_last:
            board.do_disconnect_immediately = True
        board.output_session.end()

        return DiscordUIMessages.SKIP_LAST if was_last else DiscordUIMessages.SKIP_DONE

    async def seek(self, context: MusicContext, timestamp: str) -> str:
        board = self._require_playing(context, DiscordUIMessages.SEEK_NOTHING_PLAYING)
        song = board.last_song_played
        assert song is not None

        if song.provider in self._seek_blacklist:
            raise UserInputError(DiscordUIMessages.SEEK_UNSUPPORTED.format(provider=song.provider))

        seconds = parse_timestamp(timestamp)
        if seconds is None or seconds > LimitConstants.MAX_SEEK_SECONDS:
            raise UserInputError(DiscordUIMessages.SEEK_INVALID_TIMESTAMP.format(timestamp=timestamp))

        song.options.seek = seconds
        board.enqueue_next(song)
        board.output_session.end()
        return DiscordUIMessages.SEEK_DONE.format(seconds=seconds)

    async def loop(self, context: MusicContext, count: int | None = None) -> str:
        board = self._require_playing(context, DiscordUIMessages.LOOP_NOTHING_PLAYING)
        if count is not None and count < 1:
            raise UserInputError(DiscordUIMessages.LOOP_INVALID_COUNT)

        board.set_loop(count)
        title = board.last_song_played.title if board.last_song_played else ""
        if count is None:
            return DiscordUIMessages.LOOP_ONE.format(title=title)
        return DiscordUIMessages.LOOP_COUNT.format(title=title, count=count)

    async def loop_all(self, context: MusicContext) -> str:
        board = self._require_playing(context, DiscordUIMessages.LOOP_ALL_NOTHING_PLAYING)
        board.loop_all()
        return DiscordUIMessages.LOOP_ALL

    async def unloop(self, context: MusicContext) -> str:
        board = self._require_playing(context, DiscordUIMessages.UNLOOP_NOTHING_PLAYING)
        board.unloop()
        return DiscordUIMessages.UNLOOP

    async def toggle_loop(self, context: MusicContext) -> str:
        """Repeat the current song forever, or stop repeating it."""
        board = self._require_playing(context, DiscordUIMessages.LOOP_NOTHING_PLAYING)
        if board.loop_mode in (LoopMode.ONE, LoopMode.COUNT):
            board.unloop()
            return DiscordUIMessages.UNLOOP
        return await self.loop(context)

    async def toggle_loop_all(self, context: MusicContext) -> str:
        board = self._require_playing(context, DiscordUIMessages.LOOP_ALL_NOTHING_PLAYING)
        if board.loop_mode is LoopMode.ALL:
            board.unloop()
            return DiscordUIMessages.UNLOOP
        return await self.loop_all(context)

    async def disconnect(self, context: MusicContext) -> str:
        board = self.get_music_board(context)
        if board is None:
            raise UserInputError(DiscordUIMessages.DISCONNECT_NOTHING_PLAYING)
        await self.leave_and_clear_music_board(board)
        return DiscordUIMessages.DISCONNECT_DONE

    # ─────────────────────────────────────────────────────────────────
    # Pause / resume
    # ─────────────────────────────────────────────────────────────────

    async def pause(self, context: MusicContext) -> str:
        board = self._require_playing(context, DiscordUIMessages.PAUSE_NOTHING_PLAYING)
        if board.paused:
            raise UserInputError(DiscordUIMessages.PAUSE_ALREADY_PAUSED)
        board.output_session.pause()
        board.paused = True
        return DiscordUIMessages.PAUSE_DONE

    async def resume(self, context: MusicContext) -> str:
        board = self._require_playing(context, DiscordUIMessages.PAUSE_NOTHING_PLAYING)
        if not board.paused:
            raise UserInputError(DiscordUIMessages.RESUME_NOT_PAUSED)
        board.output_session.resume()
        board.paused = False
        return DiscordUIMessages.RESUME_DONE

    async def toggle_pause(self, context: MusicContext) -> str:
        board = self._require_playing(context, DiscordUIMessages.PAUSE_NOTHING_PLAYING)
        if board.paused:
            return await self.resume(context)
        return await self.pause(context)

    # ─────────────────────────────────────────────────────────────────
    # Queue view
    # ─────────────────────────────────────────────────────────────────

    def describe_queue(self, context: MusicContext) -> str:
        board = self.get_music_board(context)
        if board is None or not board.playing or board.last_song_played is None:
            raise UserInputError(DiscordUIMessages.QUEUE_NOTHING_PLAYING)

        lines = [
            DiscordUIMessages.QUEUE_NOW_PLAYING.format(title=truncate(board.last_song_played.title)),
            DiscordUIMessages.QUEUE_LOOP.format(loop=board.looping),
        ]
        if not board.song_queue:
            lines.append(DiscordUIMessages.QUEUE_EMPTY)
            return "\n".join(lines)

        preview = board.song_queue[: LimitConstants.QUEUE_PREVIEW_SIZE]
        lines.extend(
            DiscordUIMessages.QUEUE_ENTRY.format(position=i, title=truncate(song.title))
            for i, song in enumerate(preview, start=1)
        )
        remaining = board.queue_length - len(preview)
        if remaining > 0:
            lines.append(DiscordUIMessages.QUEUE_MORE.format(count=remaining))
        return "\n".join(lines)

    # ─────────────────────────────────────────────────────────────────
    # Alone timer
    # ─────────────────────────────────────────────────────────────────

    def start_alone_timeout(self, guild_id: int) -> None:
        """Leave after the alone delay unless someone comes back.

        Replaces any pending timer; callers that must not override the idle timer
        check ``has_pending_disconnect`` first.
        """
        board = self._registry.get(guild_id)
        if board is None:
            return

        logger.info(LogTemplates.ALONE_TIMER_STARTED, guild_id, self._alone_disconnect_timeout_s)
        board.start_disconnect_timer(
            asyncio.create_task(
                self._disconnect_when_alone(board), name=f"music-board-alone-{guild_id}"
            ),
            DisconnectReason.ALONE,
        )

    def stop_alone_timeout(self, guild_id: int) -> None:
        """Cancel the alone timer; an idle timer pending instead is left running."""
        board = self._registry.get(guild_id)
        if board is None or board.disconnect_reason is not DisconnectReason.ALONE:
            return
        if board.cancel_disconnect_timer():
            logger.info(LogTemplates.DISCONNECT_TIMER_CANCELLED, guild_id)

    async def _disconnect_when_alone(self, board: MusicBoard) -> None:
        await asyncio.sleep(self._alone_disconnect_timeout_s)
        board.cancel_disconnect_timer()
        logger.info(LogTemplates.ALONE_TIMEOUT_REACHED, board.id)
        await self._notify(board, DiscordUIMessages.ALONE_DISCONNECT)
        await self.leave_and_clear_music_board(board)

    # ─────────────────────────────────────────────────────────────────
    # Best-effort side effects
    # ─────────────────────────────────────────────────────────────────

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._on_background_task_done)

    def _on_background_task_done(self, task: asyncio.Task[Any]) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(LogTemplates.BACKGROUND_TASK_FAILED, exc_info=exc)

    async def _record_song_played(self, board: MusicBoard, song: LinkableSong) -> None:
        try:
            await self._settings_repo.record_song_played(
                board.id, board.text_channel.id, song.query
            )
        except PersistenceError:
            logger.exception(LogTemplates.SETTINGS_PERSIST_FAILED, board.id)

    async def _persist_volume(self, board: MusicBoard, volume: int, previous: int | None) -> None:
        try:
            await self._settings_repo.update_volume(board.id, board.text_channel.id, volume)
        except PersistenceError:
            logger.exception(LogTemplates.SETTINGS_PERSIST_FAILED, board.id)
            if board.persisted_volume == volume:
                board.persisted_volume = previous

    async def _notify(self, board: MusicBoard, content: str) -> None:
        try:
            await board.text_channel.send(content)
        except Exception:
            logger.exception(LogTemplates.BACKGROUND_TASK_FAILED)
