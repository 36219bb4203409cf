"""Centralized constants for database schema, audio and timing values.

This module provides reusable constants that reduce magic strings and improve maintainability.
"""

from __future__ import annotations


class ConfigKeys:
    """Environment variable key names read outside of pydantic-settings."""

    NO_COLOR = "NO_COLOR"


class DatabaseTables:
    """Database table names."""

    MUSIC_SETTINGS = "music_settings"


class SQLPragmas:
    """SQLite PRAGMA statements applied to each connection."""

    JOURNAL_MODE_WAL = "PRAGMA journal_mode=WAL"
    FOREIGN_KEYS_ON = "PRAGMA foreign_keys=ON"
    BUSY_TIMEOUT = "PRAGMA busy_timeout={timeout}"


class AudioConstants:
    """Audio, volume and FFmpeg constants."""

    # discord.js-compatible volume scale: the board level is divided by this
    # reference before the logarithmic curve is applied.
    VOLUME_LOG = 15
    # Exponent used by setVolumeLogarithmic (volume ** (log2(10) / 2)).
    LOGARITHMIC_EXPONENT = 1.660964
    MAX_PCM_VOLUME = 2.0

    DEFAULT_BOARD_VOLUME = 5
    MAX_BOARD_VOLUME = 30

    FFMPEG_STREAM_BEFORE_OPTIONS = "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5"
    FFMPEG_OPTIONS_DEFAULT = "-vn"
    FFMPEG_SEEK_OPTION = "-ss {seconds}"
    FFMPEG_HEADERS_OPTION = '-headers "{headers}"'

    YTDLP_FORMAT_DEFAULT = "bestaudio/best"

    # Hostnames whose streams are played with the native (opus) decode profile.
    NATIVE_OPUS_HOSTS = ("youtube.com", "youtu.be")


class TimeConstants:
    """Time-related constants in seconds."""

    VOICE_CONNECT_TIMEOUT = 10.0
    DEFAULT_IDLE_DISCONNECT = 300.0
    DEFAULT_ALONE_DISCONNECT = 60.0
    YTDLP_CACHE_TTL = 3600
    CONTROLS_VIEW_TIMEOUT = 900.0


class LimitConstants:
    """Numeric limits and constraints."""

    MAX_DISCORD_SNOWFLAKE = 2**64
    MAX_SEEK_SECONDS = 86_400
    YTDLP_CACHE_MAX_SIZE = 500
    QUEUE_PREVIEW_SIZE = 10
