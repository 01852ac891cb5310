"""Slug shape checks and slug generation from display names."""

from __future__ import annotations

import re

from core.constants import SLUG_PATTERN

_DISALLOWED_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE_RUN = re.compile(r"\s+")
_HYPHEN_RUN = re.compile(r"-+")


def is_valid_slug_format(slug: str) -> bool:
    """Return whether a slug is one lowercase alphanumeric run with inner hyphens."""
    return SLUG_PATTERN.fullmatch(slug) is not None


def generate_slug(name: str) -> str:
    """Generate a slug from a display name.

    ``generate_slug(generate_slug(name)) == generate_slug(name)`` holds
    for every input.

    Args:
        name: Display name, e.g. ``Pro  Tools™``.

    Returns:
        Slug such as ``pro-tools``; empty when no usable characters remain.
    """
    slug = _DISALLOWED_CHARS.sub("", name.lower())
    slug = _WHITESPACE_RUN.sub("-", slug)
    slug = _HYPHEN_RUN.sub("-", slug)
    return slug.strip("-")
