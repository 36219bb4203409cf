"""Discord UI views and components."""

from __future__ import annotations

from discord_music_board.infrastructure.discord.views.base_view import BaseInteractiveView
from discord_music_board.infrastructure.discord.views.music_controls_view import (
    MusicControlsView,
)

__all__ = [
    "BaseInteractiveView",
    "MusicControlsView",
]
