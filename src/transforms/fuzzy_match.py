"""Nearest-valid-value suggestions and option list formatting.

This module powers "Did you mean ...?" hints in validation messages.
Matching is case-insensitive Levenshtein distance with a hard ceiling.
"""

from __future__ import annotations

from typing import Iterable

from rapidfuzz.distance import Levenshtein

from core.constants import DEFAULT_OPTION_DISPLAY_LIMIT, MAX_SUGGESTION_DISTANCE


def find_closest_match(
    value: str,
    options: Iterable[str],
    max_distance: int = MAX_SUGGESTION_DISTANCE,
) -> str | None:
    """Find the nearest option within the distance ceiling.

    Args:
        value: Input value to match.
        options: Valid option values.
        max_distance: Largest accepted edit distance.

    Returns:
        Closest option, or None when nothing is within ``max_distance``.
        Ties resolve to the alphabetically first option.
    """
    normalized_value = value.lower()
    closest: str | None = None
    closest_distance = max_distance + 1
    for option in sorted(set(options)):
        distance = Levenshtein.distance(normalized_value, option.lower())
        if distance < closest_distance:
            closest = option
            closest_distance = distance
    return closest


def format_valid_options(options: Iterable[str], limit: int = DEFAULT_OPTION_DISPLAY_LIMIT) -> str:
    """Format a sorted, possibly truncated option list for display.

    Args:
        options: Option values.
        limit: Maximum number of options shown before truncation.

    Returns:
        ``a, b, c`` or ``a, b, ... (12 total)`` when truncated.
    """
    sorted_options = sorted(set(options))
    if len(sorted_options) <= limit:
        return ", ".join(sorted_options)
    shown = ", ".join(sorted_options[:limit])
    return f"{shown}, ... ({len(sorted_options)} total)"
