"""Opaque record identifier tokens."""

from __future__ import annotations

import secrets
from typing import Container

from core.constants import ID_ALPHABET, ID_LENGTH, ID_PATTERN, LEGACY_ID_PATTERN


def generate_record_id(used_ids: Container[str]) -> str:
    """Generate a fresh URL-safe token not present in ``used_ids``.

    Args:
        used_ids: Identifiers already present in the dataset.

    Returns:
        New identifier token.
    """
    while True:
        candidate = "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))
        if candidate not in used_ids:
            return candidate


def is_valid_record_id(value: object) -> bool:
    """Return whether a value is a current-scheme identifier token."""
    return isinstance(value, str) and ID_PATTERN.fullmatch(value) is not None


def is_legacy_record_id(value: object) -> bool:
    """Return whether a value is a legacy numeric identifier."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value >= 0
    return isinstance(value, str) and LEGACY_ID_PATTERN.fullmatch(value) is not None
