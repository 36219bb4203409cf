"""Shared validators for settings and domain models."""

from discord_music_board.domain.shared.constants import LimitConstants
from discord_music_board.domain.shared.messages import ErrorMessages


def validate_discord_snowflake(value: int) -> int:
    """Validate a Discord snowflake ID.

    Discord snowflake IDs are 64-bit unsigned integers representing unique
    identifiers for users, guilds, channels, messages, etc.

    Raises:
        ValueError: If the snowflake ID is invalid.
    """
    if value <= 0:
        raise ValueError(ErrorMessages.INVALID_SNOWFLAKE)
    if value >= LimitConstants.MAX_DISCORD_SNOWFLAKE:
        raise ValueError(ErrorMessages.SNOWFLAKE_TOO_LARGE)
    return value
