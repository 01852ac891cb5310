"""Unit tests for nearest-match suggestions and option formatting."""

from __future__ import annotations

from transforms.fuzzy_match import find_closest_match, format_valid_options

_PLATFORMS = ("mac", "windows", "linux", "ios", "android")


def test_find_closest_match_counts_edits() -> None:
    """Three single-character edits should still match."""
    assert find_closest_match("kitten", ("sitting",)) == "sitting"


def test_find_closest_match_is_case_insensitive() -> None:
    """Matching should ignore letter case."""
    assert find_closest_match("WINDOW", _PLATFORMS) == "windows"


def test_find_closest_match_returns_none_beyond_distance() -> None:
    """Values further than the distance ceiling should get no suggestion."""
    assert find_closest_match("playstation", _PLATFORMS) is None


def test_find_closest_match_accepts_distance_three() -> None:
    """A distance of exactly three should still produce a suggestion."""
    assert find_closest_match("synthxyz", ("synth",)) == "synth"


def test_find_closest_match_breaks_ties_alphabetically() -> None:
    """Equally close options should resolve to the alphabetically first."""
    assert find_closest_match("cat", ("hat", "bat")) == "bat"


def test_format_valid_options_lists_short_sets() -> None:
    """Short option lists should be sorted and fully shown."""
    assert format_valid_options(["windows", "mac", "linux"]) == "linux, mac, windows"


def test_format_valid_options_truncates_long_sets() -> None:
    """Long option lists should be truncated with a total count."""
    options = [f"option-{index:02d}" for index in range(12)]

    formatted = format_valid_options(options, limit=3)

    assert formatted == "option-00, option-01, option-02, ... (12 total)"
