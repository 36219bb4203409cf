"""Owned collection of music boards keyed by guild."""

from __future__ import annotations

import logging

from discord_music_board.domain.music.entities import MusicBoard
from discord_music_board.domain.shared.exceptions import DomainError
from discord_music_board.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)


class MusicBoardRegistry:
    """Holds at most one MusicBoard per guild.

    Boards are inserted explicitly on first play and removed explicitly on teardown.
    """

    def __init__(self) -> None:
        self._boards: dict[int, MusicBoard] = {}

    def get(self, guild_id: int) -> MusicBoard | None:
        return self._boards.get(guild_id)

    def create(self, board: MusicBoard) -> MusicBoard:
        if board.id in self._boards:
            raise DomainError(
                ErrorMessages.BOARD_ALREADY_EXISTS.format(guild_id=board.id),
                code="BOARD_ALREADY_EXISTS",
            )
        self._boards[board.id] = board
        logger.info(LogTemplates.BOARD_CREATED, board.id)
        return board

    def remove(self, guild_id: int) -> MusicBoard | None:
        board = self._boards.pop(guild_id, None)
        if board is not None:
            logger.info(LogTemplates.BOARD_REMOVED, guild_id)
        return board

    def all(self) -> list[MusicBoard]:
        return list(self._boards.values())

    def __len__(self) -> int:
        return len(self._boards)

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._boards
