"""Tests for timestamp parsing and reply truncation helpers."""

import pytest

from discord_music_board.utils.reply import parse_timestamp, truncate


class TestParseTimestamp:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("0", 0),
            ("90", 90),
            (" 90 ", 90),
            ("1:30", 90),
            ("01:05", 65),
            ("1:30:00", 5400),
            ("45s", 45),
            ("2m30s", 150),
            ("1h2m3s", 3723),
            ("1H", 3600),
            ("3m", 180),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_timestamp(value) == expected

    @pytest.mark.parametrize("value", ["", "   ", "abc", "-5", "1:-30", "1:2:3:4", "1:xx", "5x", "m"])
    def test_invalid(self, value):
        assert parse_timestamp(value) is None


class TestTruncate:
    def test_short_text_unchanged(self):
        assert truncate("hello") == "hello"

    def test_long_text_gets_ellipsis(self):
        result = truncate("x" * 100, 10)

        assert len(result) == 10
        assert result.endswith("…")
