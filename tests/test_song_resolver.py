"""Tests for SongResolver provider selection."""

import pytest

from discord_music_board.application.services.song_resolver import SongResolver
from discord_music_board.domain.music.value_objects import ProviderKind
from discord_music_board.domain.shared.exceptions import ResolutionError

from conftest import FakeProvider


@pytest.fixture
def youtube():
    return FakeProvider(ProviderKind.YOUTUBE, url_prefix="https://youtu.be/")


@pytest.fixture
def direct():
    return FakeProvider(ProviderKind.DIRECT_LINK, url_prefix="https://cdn.example.com/")


@pytest.fixture
def resolver(youtube, direct):
    return SongResolver((youtube, direct), youtube)


class TestSongResolver:
    @pytest.mark.asyncio
    async def test_native_url_goes_to_matching_provider(self, resolver, youtube, direct):
        song = await resolver.resolve("https://cdn.example.com/track.mp3")

        assert song.provider is ProviderKind.DIRECT_LINK
        assert direct.calls == [("https://cdn.example.com/track.mp3", True)]
        assert youtube.calls == []

    @pytest.mark.asyncio
    async def test_first_matching_provider_wins(self, youtube, direct):
        direct.url_prefix = "https://youtu.be/"
        resolver = SongResolver((youtube, direct), youtube)

        await resolver.resolve("https://youtu.be/abc")

        assert youtube.calls == [("https://youtu.be/abc", True)]
        assert direct.calls == []

    @pytest.mark.asyncio
    async def test_plain_text_uses_fallback_search(self, resolver, youtube, direct):
        song = await resolver.resolve("never gonna give you up")

        assert song.provider is ProviderKind.YOUTUBE
        assert youtube.calls == [("never gonna give you up", False)]
        assert direct.calls == []

    @pytest.mark.asyncio
    async def test_no_match_returns_none(self, resolver, youtube):
        youtube.missing.add("zzz")

        assert await resolver.resolve("zzz") is None

    @pytest.mark.asyncio
    async def test_forced_provider_used_even_for_other_urls(self, resolver, youtube, direct):
        await resolver.resolve("https://cdn.example.com/track.mp3", force_provider=ProviderKind.YOUTUBE)

        assert youtube.calls == [("https://cdn.example.com/track.mp3", False)]
        assert direct.calls == []

    @pytest.mark.asyncio
    async def test_forced_provider_keeps_native_flag(self, resolver, youtube):
        await resolver.resolve("https://youtu.be/abc", force_provider=ProviderKind.YOUTUBE)

        assert youtube.calls == [("https://youtu.be/abc", True)]

    @pytest.mark.asyncio
    async def test_forced_provider_missing_returns_none(self, youtube):
        resolver = SongResolver((youtube,), youtube)

        assert await resolver.resolve("a", force_provider=ProviderKind.DIRECT_LINK) is None
        assert youtube.calls == []

    @pytest.mark.asyncio
    async def test_lookup_failure_propagates(self, resolver, youtube):
        youtube.error = ResolutionError("youtube", "HTTP 429")

        with pytest.raises(ResolutionError):
            await resolver.resolve("anything")

    def test_find_provider(self, resolver, direct):
        assert resolver.find_provider(ProviderKind.DIRECT_LINK) is direct
        assert resolver.fallback.kind is ProviderKind.YOUTUBE
        assert len(resolver.providers) == 2
