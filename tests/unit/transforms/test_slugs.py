"""Unit tests for slug shape checks and slug generation."""

from __future__ import annotations

import pytest

from transforms.slugs import generate_slug, is_valid_slug_format


@pytest.mark.parametrize("slug", ["serum", "pro-tools", "a", "x1", "ableton-live-12"])
def test_valid_slug_formats_are_accepted(slug: str) -> None:
    """Lowercase alphanumeric runs with inner hyphens should be valid."""
    assert is_valid_slug_format(slug)


@pytest.mark.parametrize("slug", ["", "-serum", "serum-", "Serum", "pro tools", "pro_tools", "ü-synth"])
def test_invalid_slug_formats_are_rejected(slug: str) -> None:
    """Uppercase, edge hyphens, spaces and other characters should be invalid."""
    assert not is_valid_slug_format(slug)


def test_generate_slug_normalizes_display_name() -> None:
    """Display names should collapse to lowercase hyphenated slugs."""
    assert generate_slug("  Pro  Tools™ Ultimate ") == "pro-tools-ultimate"


def test_generate_slug_collapses_hyphen_runs() -> None:
    """Repeated separators should collapse to one hyphen."""
    assert generate_slug("Kontakt -- 7") == "kontakt-7"


@pytest.mark.parametrize("name", ["Serum 2", "u-he Diva", "--Weird__Name--", "Über Synth", "FL Studio 21.2"])
def test_generate_slug_is_idempotent(name: str) -> None:
    """Generating a slug from a slug should return it unchanged."""
    slug = generate_slug(name)

    assert generate_slug(slug) == slug


@pytest.mark.parametrize("name", ["Serum 2", "u-he Diva", "FL Studio 21.2", "Massive X"])
def test_generated_slugs_are_valid(name: str) -> None:
    """Non-empty generated slugs should satisfy the slug pattern."""
    assert is_valid_slug_format(generate_slug(name))
