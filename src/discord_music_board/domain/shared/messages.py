"""Centralized message constants for error messages, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Discord ID Validation Errors
    INVALID_SNOWFLAKE = "Discord snowflake ID must be positive"
    SNOWFLAKE_TOO_LARGE = "Discord snowflake ID exceeds maximum value (2^64)"

    # Board Errors
    BOARD_ALREADY_EXISTS = "A music board already exists for guild {guild_id}"

    # Settings Validation Errors
    INVALID_DATABASE_URL = "Database URL must start with sqlite://"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"

    # Provider Errors
    YOUTUBE_LOOKUP_FAILED = "YouTube lookup failed: {error}"
    YOUTUBE_NO_STREAM = "No playable audio stream found for '{title}'"

    # Output Session Errors
    OUTPUT_SESSION_FAILED = "Audio output failed: {error}"

    # Authentication
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN environment variable is required"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Bot Lifecycle
    BOT_STARTING = "Starting music board bot ({environment})"
    BOT_SETUP = "Running bot setup hook"
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_STOPPED = "Bot stopped"
    BOT_KEYBOARD_INTERRUPT = "Interrupted, shutting down"
    BOT_FATAL_ERROR = "Fatal error while running bot: %r"
    BOT_READY = "Logged in as %s (ID: %s), connected to %d guilds"
    BOT_COG_LOADED = "Loaded cog %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s"
    BOT_COMMANDS_SYNCED = "Synced %d application commands"
    BOT_GUILD_COMMANDS_SYNCED = "Synced %d application commands to guild %s"
    BOT_SYNC_FAILED = "Failed to sync application commands: %s"
    BOT_SLASH_COMMAND_ERROR = "Unhandled error in /%s: %r"
    BOT_ERROR_MESSAGE_SEND_FAILED = "Could not deliver error message for /%s"
    BOT_SHUTTING_DOWN = "Shutting down bot"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error while shutting down container: %r"

    # Database Lifecycle
    DATABASE_INITIALIZED = "Database initialized at %s"
    DATABASE_CLOSED = "Database manager closed"

    # Settings Store
    SETTINGS_SONG_RECORDED = "Recorded last song '%s' for guild %s channel %s"
    SETTINGS_VOLUME_PERSISTED = "Persisted volume %s for guild %s channel %s"
    SETTINGS_VOLUME_UNCHANGED = "Volume %s already stored for guild %s channel %s"
    SETTINGS_PERSIST_FAILED = "Failed to persist music settings for guild %s"

    # Provider Resolution
    PROVIDER_FORCED_MISSING = "Forced provider %s is not registered"
    PROVIDER_SELECTED = "Resolving '%s' with provider %s (native_url=%s)"
    PROVIDER_NO_MATCH = "Provider %s found no match for '%s'"
    YTDLP_CACHE_HIT = "yt-dlp cache hit for %s"
    YTDLP_CACHE_PRUNED = "Pruned %d expired yt-dlp cache entries"
    YTDLP_EXTRACT_FAILED = "yt-dlp extraction failed for %s"

    # Voice
    VOICE_CONNECTED = "Connected to voice channel %s in guild %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_NO_PERMISSION = "No permission to connect to channel %s"
    VOICE_CLIENT_ERROR = "Client error connecting: %r"
    VOICE_LEAVE_FAILED = "Error leaving voice in guild %s"
    OUTPUT_FINISHED = "Output session finished in guild %s (error=%r)"

    # Music Board
    BOARD_CREATED = "Created music board for guild %s"
    BOARD_REMOVED = "Removed music board for guild %s"
    BOARD_TEARDOWN_DEFERRED = "Deferring teardown of guild %s until current song ends"
    BOARD_TEARDOWN_AWAITED = "Waiting for pending teardown of guild %s before playing"
    SONG_STARTED = "Started playing '%s' in guild %s"
    SONG_QUEUED = "Queued '%s' in guild %s (queue length %d)"
    SONG_FINISHED = "Finished '%s' in guild %s"
    PLAYBACK_FAILED = "Playback failed for '%s' in guild %s: %s"
    QUEUE_EXHAUSTED = "Queue exhausted in guild %s, disconnecting in %ss"
    IDLE_TIMEOUT_REACHED = "Idle timeout reached in guild %s"
    ALONE_TIMER_STARTED = "Alone in voice for guild %s, disconnecting in %ss"
    ALONE_TIMEOUT_REACHED = "Alone timeout reached in guild %s"
    DISCONNECT_TIMER_CANCELLED = "Cancelled disconnect timer for guild %s"
    DRIVER_CRASHED = "Playback driver crashed for guild %s"
    BACKGROUND_TASK_FAILED = "Background task failed"


class DiscordUIMessages:
    """User-facing Discord messages and responses.

    These strings are shown directly to users in channel messages and interaction replies.
    """

    # Playback
    PLAY_STARTED = "Start playing: `{title}`"
    PLAY_QUEUED = "Added to queue: **{title}**"
    PLAY_NO_MATCH = "Couldn't find a match for query `{query}`..."
    PLAY_ERROR = "**_ERROR_** : {error}"
    PLAYBACK_FAILED = "Something went wrong while playing `{title}`: {error}"

    # Skip
    SKIP_NOTHING_PLAYING = "Play a song first before trying to skip it!"
    SKIP_DONE = "Skipped!"
    SKIP_LAST = "Skipped! No more songs are in the queue, goodbye!"

    # Disconnect
    DISCONNECT_NOTHING_PLAYING = "I'm not even playing a song :/"
    DISCONNECT_DONE = "Adios!"
    ALONE_DISCONNECT = "Nobody's listening to me anymore, cya!"

    # Seek
    SEEK_NOTHING_PLAYING = "I cannot seek through a song when nothing is playing!"
    SEEK_UNSUPPORTED = "Unfortunately, seeking for `{provider}` is not available."
    SEEK_INVALID_TIMESTAMP = "`{timestamp}` is not a valid timestamp (try `90`, `1:30` or `1m30s`)."
    SEEK_DONE = "Seeked current song to {seconds} seconds!"

    # Loop
    LOOP_NOTHING_PLAYING = "I cannot set a looping song when nothing is playing!"
    LOOP_INVALID_COUNT = "The loop count must be a positive number."
    LOOP_ONE = "Looping current song (`{title}`)!"
    LOOP_COUNT = "Looping current song (`{title}`) **{count}** times!"
    LOOP_ALL_NOTHING_PLAYING = "I cannot loop the player when nothing is playing!"
    LOOP_ALL = "Looping all song in the current playlist!"
    UNLOOP_NOTHING_PLAYING = "I don't need to unloop anything : nothing is playing!"
    UNLOOP = "Unlooped the current music playlist!"

    # Volume
    VOLUME_NOTHING_PLAYING = "I cannot change the volume when nothing is playing!"
    VOLUME_OUT_OF_RANGE = "Volume must be between 0 and {max_volume}."
    VOLUME_SET = "Volume set to **{volume}**"

    # Pause
    PAUSE_NOTHING_PLAYING = "I cannot pause when nothing is playing!"
    PAUSE_ALREADY_PAUSED = "The music is already paused!"
    PAUSE_DONE = "Paused the music."
    RESUME_NOT_PAUSED = "The music is not paused!"
    RESUME_DONE = "Resumed the music."

    # Last played
    LAST_PLAYED_NONE = "No song has been played in this channel yet!"

    # Queue
    QUEUE_NOTHING_PLAYING = "Nothing is playing right now."
    QUEUE_NOW_PLAYING = "Now playing: `{title}`"
    QUEUE_LOOP = "Loop: {loop}"
    QUEUE_EMPTY = "The queue is empty."
    QUEUE_ENTRY = "{position}. {title}"
    QUEUE_MORE = "...and {count} more"

    # Generic
    STATE_SERVER_ONLY = "This command only works in a server."
    STATE_NOT_TEXT_CHANNEL = "This command only works in a text channel."
    UNEXPECTED_ERROR = "An error occurred: {error}"
