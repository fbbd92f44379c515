"""Tests for utility functions."""

import pytest

from nicostream.utils import (
    ACTION_TRACK_ID_PREFIX,
    extract_between,
    generate_action_track_id,
    parse_video_id,
)


class TestParseVideoId:
    """Test cases for parse_video_id."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("sm9", "sm9"),
            ("  so38016254 ", "so38016254"),
            ("nm2829323", "nm2829323"),
            ("https://www.nicovideo.jp/watch/sm9", "sm9"),
            ("https://www.nicovideo.jp/watch/sm9/", "sm9"),
            ("https://www.nicovideo.jp/watch/sm9?ref=search_key_video&playlist=abc", "sm9"),
            ("http://nicovideo.jp/watch/sm9", "sm9"),
            ("www.nicovideo.jp/watch/sm9", "sm9"),
            ("https://sp.nicovideo.jp/watch/sm9", "sm9"),
            ("https://nico.ms/sm9", "sm9"),
        ],
    )
    def test_recognized(self, value: str, expected: str) -> None:
        assert parse_video_id(value) == expected

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "9",
            "invalid id!",
            "https://www.youtube.com/watch?v=sm9",
            "https://www.nicovideo.jp/user/12345",
            "https://www.nicovideo.jp/watch/",
            "https://nico.ms/",
        ],
    )
    def test_rejected(self, value: str) -> None:
        assert parse_video_id(value) is None


class TestActionTrackId:
    """Test cases for generate_action_track_id."""

    def test_format(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("nicostream.utils.time.time", lambda: 1_700_000_000.5)
        track_id = generate_action_track_id()
        assert track_id.startswith(ACTION_TRACK_ID_PREFIX)
        assert track_id.endswith("_1700000000500")

    def test_unique_within_same_millisecond(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("nicostream.utils.time.time", lambda: 1_700_000_000.0)
        assert len({generate_action_track_id() for _ in range(50)}) == 50


class TestExtractBetween:
    """Test cases for extract_between."""

    def test_found(self) -> None:
        assert extract_between('<div data-api-data="abc" x="y">', 'data-api-data="', '"') == "abc"

    def test_first_occurrence(self) -> None:
        assert extract_between("[a][b]", "[", "]") == "a"

    def test_missing_start(self) -> None:
        assert extract_between("nothing here", "[", "]") is None

    def test_missing_end(self) -> None:
        assert extract_between('data-api-data="abc', 'data-api-data="', '"') is None
