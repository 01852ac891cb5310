"""Unit tests for markup, video link, and format identifier checks."""

from __future__ import annotations

import pytest

from core.error_codes import ValidationErrorCode
from validation.format_identifier_checks import identifier_problem
from validation.link_checks import canonical_youtube_url, youtube_url_problem
from validation.markup_checks import find_markup_problems


def test_unclosed_fence_is_reported() -> None:
    """An odd number of fences should be E302."""
    problems = find_markup_problems("Intro\n```\ncode")

    assert [code for code, _ in problems] == [ValidationErrorCode.E302_UNCLOSED_CODE_BLOCK]


def test_unbalanced_inline_code_names_line() -> None:
    """An odd backtick count outside fences should name its line."""
    problems = find_markup_problems("ok `a`\nbroken `b")

    assert problems == [
        (ValidationErrorCode.E303_UNBALANCED_BACKTICKS, "Invalid markdown: unclosed inline code on line 2.")
    ]


def test_backticks_inside_fences_are_ignored() -> None:
    """Content of a closed fence should not be checked for inline code."""
    assert find_markup_problems("```\na ` b\n```\n") == []


@pytest.mark.parametrize(
    ("url", "fragment"),
    [
        ("https://youtu.be/abc", "youtu.be"),
        ("https://youtube.com/watch?v=abc", "www.youtube.com"),
        ("https://www.youtube.com/embed/abc", "/embed/"),
        ("http://www.youtube.com/watch?v=abc", "watch?v={videoId}"),
    ],
)
def test_non_canonical_youtube_urls(url: str, fragment: str) -> None:
    """Every non-canonical YouTube shape should be explained."""
    assert fragment in youtube_url_problem(url)


def test_other_hosts_are_not_checked() -> None:
    """Non-YouTube URLs should pass the video check."""
    assert youtube_url_problem("https://vimeo.com/123") is None


def test_canonical_url_recovers_video_id() -> None:
    """Embed links should rewrite to watch form."""
    assert canonical_youtube_url("https://www.youtube.com/embed/abc-123") == (
        "https://www.youtube.com/watch?v=abc-123"
    )


@pytest.mark.parametrize(
    ("format_name", "value", "valid"),
    [
        ("vst3", "com.xferrecords.Serum", True),
        ("au", "Serum", False),
        ("aax", "XfRc", True),
        ("aax", "XfRcX", False),
        ("lv2", "https://vendor.com/plugins/name", True),
        ("lv2", "urn:vendor:name", False),
        ("standalone", "anything at all", True),
    ],
)
def test_identifier_patterns(format_name: str, value: str, valid: bool) -> None:
    """Identifiers should follow their format's pattern."""
    assert (identifier_problem(format_name, value) is None) is valid


def test_empty_identifier_is_reported() -> None:
    """A blank identifier should be reported with the expected shape."""
    assert identifier_problem("clap", "  ") == (
        "Empty clap identifier. Expected: Reverse domain notation (e.g., com.u-he.Diva)."
    )
