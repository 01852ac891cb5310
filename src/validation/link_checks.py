"""Video link shape checks."""

from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

from core.constants import YOUTUBE_CANONICAL_PATTERN, YOUTUBE_HOSTS
from core.error_codes import AutoFix, ValidationErrorCode
from validation.issue_collector import IssueCollector


def youtube_url_problem(url: str) -> str | None:
    """Return why a YouTube URL is not canonical, or None.

    Non-YouTube and unparseable URLs are not this check's concern.
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return None
    hostname = (parts.hostname or "").lower()
    if hostname not in YOUTUBE_HOSTS:
        return None
    if hostname in ("youtube.com", "m.youtube.com"):
        return f"YouTube URL should use 'www.youtube.com' instead of '{hostname}'."
    if parts.path.startswith("/embed/"):
        return "YouTube URL should use '/watch?v=' format instead of '/embed/'."
    if hostname == "youtu.be":
        return "YouTube URL should use 'www.youtube.com/watch?v=' format instead of 'youtu.be'."
    if YOUTUBE_CANONICAL_PATTERN.fullmatch(url) is None:
        return "YouTube URL should match format 'https://www.youtube.com/watch?v={videoId}'."
    return None


def canonical_youtube_url(url: str) -> str | None:
    """Rewrite a YouTube URL into canonical watch form when the video id is recoverable."""
    parts = urlsplit(url)
    hostname = (parts.hostname or "").lower()
    video_id: str | None = None
    if hostname == "youtu.be":
        video_id = parts.path.strip("/") or None
    elif parts.path.startswith("/embed/"):
        video_id = parts.path[len("/embed/") :].strip("/") or None
    else:
        video_id = (parse_qs(parts.query).get("v") or [None])[0]
    if not video_id:
        return None
    candidate = f"https://www.youtube.com/watch?v={video_id}"
    return candidate if YOUTUBE_CANONICAL_PATTERN.fullmatch(candidate) else None


def check_video_url(url: str, path: str, collector: IssueCollector) -> None:
    """Report a non-canonical YouTube link URL."""
    problem = youtube_url_problem(url)
    if problem is None:
        return
    canonical = canonical_youtube_url(url)
    collector.add(
        ValidationErrorCode.E301_YOUTUBE_URL_FORMAT,
        problem,
        path,
        auto_fix=AutoFix("replace", f"Use '{canonical}'", url, canonical, path)
        if canonical
        else None,
    )
