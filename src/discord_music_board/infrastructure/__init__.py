"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Persistence (SQLite music settings store)
- Discord (bot, cogs, voice adapter)
- Audio (yt-dlp and direct-link song providers)
"""
