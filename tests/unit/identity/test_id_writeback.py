"""Unit tests for identifier write-back into record text."""

from __future__ import annotations

from identity.id_writeback import set_record_id_text

_TOKEN = "V1StGXR8_Z5jdHi6B-myT"


def test_id_is_inserted_as_first_key() -> None:
    """A new id should become the first line and keep the rest intact."""
    text = "# Serum record\nname: Serum\nmanufacturer: xfer\n"

    updated = set_record_id_text(text, _TOKEN)

    assert updated == f"id: {_TOKEN}\n# Serum record\nname: Serum\nmanufacturer: xfer\n"


def test_existing_id_is_replaced_and_moved_first() -> None:
    """An existing top-level id line should be replaced, not duplicated."""
    text = "name: Serum\nid: 17\nmanufacturer: xfer\n"

    updated = set_record_id_text(text, _TOKEN)

    assert updated == f"id: {_TOKEN}\nname: Serum\nmanufacturer: xfer\n"


def test_id_goes_after_document_marker() -> None:
    """An explicit document start marker should stay first."""
    updated = set_record_id_text("---\nname: Serum\n", _TOKEN)

    assert updated.startswith(f"---\nid: {_TOKEN}\n")


def test_numeric_looking_token_is_quoted() -> None:
    """Tokens YAML would read as numbers should be quoted."""
    token = "123456789012345678901"

    updated = set_record_id_text("name: Serum\n", token)

    assert updated.startswith(f"id: '{token}'\n")


def test_nested_id_keys_are_untouched() -> None:
    """Only the top-level id line should change."""
    text = "name: Serum\nlinks:\n  - id: keep-me\n    type: website\n"

    updated = set_record_id_text(text, _TOKEN)

    assert "  - id: keep-me\n" in updated
