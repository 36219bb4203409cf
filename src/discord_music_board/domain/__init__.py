# ruff: noqa: N999
"""
Domain Layer

Contains pure business logic organized by bounded contexts:
- shared/: Exceptions, message catalogues, constants and validated types
- music/: Songs, music boards, loop policy and the settings-store contract
"""

from discord_music_board.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
