"""Plugin format identifier pattern checks.

Bundle-style formats use reverse domain notation, AAX uses a 4-character
PACE code, and LV2 uses a URI. Formats without a known pattern accept
any value.
"""

from __future__ import annotations

import re
from typing import Mapping

from core.error_codes import ValidationErrorCode
from validation.issue_collector import IssueCollector, child_path

_REVERSE_DOMAIN = re.compile(r"^[a-zA-Z][a-zA-Z0-9-]*(\.[a-zA-Z][a-zA-Z0-9-]*){1,}$")

IDENTIFIER_PATTERNS: dict[str, re.Pattern[str]] = {
    "au": _REVERSE_DOMAIN,
    "bundle": _REVERSE_DOMAIN,
    "vst3": _REVERSE_DOMAIN,
    "clap": _REVERSE_DOMAIN,
    "aax": re.compile(r"^[A-Za-z0-9]{4}$"),
    "lv2": re.compile(r"^https?://.+$"),
}

FORMAT_HINTS: dict[str, str] = {
    "au": "Reverse domain notation (e.g., com.xferrecords.Serum)",
    "bundle": "Reverse domain notation (e.g., com.vendor.AppName)",
    "vst3": "Reverse domain notation (e.g., com.native-instruments.Massive)",
    "clap": "Reverse domain notation (e.g., com.u-he.Diva)",
    "aax": "4-character PACE code (e.g., XfRc)",
    "lv2": "URI format (e.g., https://vendor.com/plugins/name)",
}


def identifier_problem(format_name: str, value: str) -> str | None:
    """Return a problem description for one identifier, or None when valid."""
    pattern = IDENTIFIER_PATTERNS.get(format_name)
    if pattern is None:
        return None
    hint = FORMAT_HINTS[format_name]
    if not value.strip():
        return f"Empty {format_name} identifier. Expected: {hint}."
    if pattern.fullmatch(value) is None:
        return f'Invalid {format_name} identifier format: "{value}". Expected: {hint}.'
    return None


def check_format_identifiers(data: Mapping[str, object], collector: IssueCollector) -> None:
    """Report identifiers that do not match their format's pattern."""
    identifiers = data.get("identifiers")
    if not isinstance(identifiers, Mapping):
        return
    for format_name, value in identifiers.items():
        if not isinstance(value, str):
            continue
        problem = identifier_problem(str(format_name), value)
        if problem is not None:
            collector.add(
                ValidationErrorCode.E111_INVALID_FORMAT_IDENTIFIER,
                problem,
                child_path("identifiers", str(format_name)),
            )
