"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.constants import AudioConstants, TimeConstants
from ..domain.shared.messages import ErrorMessages
from ..domain.shared.types import BusyTimeoutMs, ConnectionTimeoutS
from ..domain.shared.validators import validate_discord_snowflake


class DatabaseSettings(BaseModel):
    """Database configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(
        default="sqlite:///data/music_board.db",
        validation_alias=AliasChoices("url", "database_url", "db_url"),
    )
    busy_timeout_ms: BusyTimeoutMs = Field(
        default=5000,
        validation_alias=AliasChoices("busy_timeout_ms", "busy_timeout"),
    )
    connection_timeout_s: ConnectionTimeoutS = Field(
        default=10,
        validation_alias=AliasChoices("connection_timeout_s", "connection_timeout"),
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate database URL format."""
        if not v.startswith("sqlite://"):
            raise ValueError(ErrorMessages.INVALID_DATABASE_URL)
        return v


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    command_prefix: str = Field(
        default="!",
        min_length=1,
        max_length=5,
        validation_alias=AliasChoices("command_prefix", "prefix"),
    )
    owner_ids: tuple[int, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("owner_ids", "owners")
    )
    guild_ids: tuple[int, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("guild_ids", "guilds")
    )
    sync_on_startup: bool = False

    @field_validator("owner_ids", "guild_ids", mode="before")
    @classmethod
    def validate_snowflake_ids(cls, v: tuple[int, ...] | list[int]) -> tuple[int, ...]:
        """Validate Discord snowflake IDs and convert lists to tuples."""
        # Convert list to tuple if needed (from JSON array in env vars)
        if isinstance(v, list):
            v = tuple(v)
        for snowflake in v:
            validate_discord_snowflake(snowflake)
        return v


class AudioSettings(BaseModel):
    """FFmpeg and yt-dlp configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    ffmpeg_before_options: str = AudioConstants.FFMPEG_STREAM_BEFORE_OPTIONS
    ffmpeg_options: str = AudioConstants.FFMPEG_OPTIONS_DEFAULT
    ytdlp_format: str = Field(
        default=AudioConstants.YTDLP_FORMAT_DEFAULT,
        validation_alias=AliasChoices("ytdlp_format", "format"),
    )
    ytdlp_cache_ttl_s: int = Field(default=TimeConstants.YTDLP_CACHE_TTL, ge=0)


class MusicSettings(BaseModel):
    """Music Board engine configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    disconnect_timeout_s: float = Field(
        default=TimeConstants.DEFAULT_IDLE_DISCONNECT,
        gt=0,
        validation_alias=AliasChoices("disconnect_timeout_s", "disconnect_timeout"),
    )
    alone_disconnect_timeout_s: float = Field(
        default=TimeConstants.DEFAULT_ALONE_DISCONNECT,
        gt=0,
        validation_alias=AliasChoices("alone_disconnect_timeout_s", "alone_disconnect_timeout"),
    )
    default_volume: int = Field(default=AudioConstants.DEFAULT_BOARD_VOLUME, ge=0)
    max_volume: int = Field(default=AudioConstants.MAX_BOARD_VOLUME, ge=1)

    @model_validator(mode="after")
    def validate_default_volume(self) -> MusicSettings:
        if self.default_volume > self.max_volume:
            raise ValueError(
                f"default_volume ({self.default_volume}) exceeds max_volume ({self.max_volume})"
            )
        return self


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - DISCORD__TOKEN, DISCORD__GUILD_IDS, ... (nested with ``__``)
    - DATABASE__URL
    - MUSIC__DISCONNECT_TIMEOUT, MUSIC__ALONE_DISCONNECT_TIMEOUT, MUSIC__DEFAULT_VOLUME
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    music: MusicSettings = Field(default_factory=MusicSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels))
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
