"""Write identifiers into record text without reformatting it.

Only the top-level ``id`` line is touched. The identifier always ends up
as the first key of the document.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Mapping

from core.errors import CatalogIdentifierError, CatalogYamlSyntaxError
from ingest.yaml_documents import parse_yaml_text, read_yaml_text

_TOP_LEVEL_ID_LINE = re.compile(r"^id:[^\n]*(\n|$)", re.MULTILINE)
_DOCUMENT_START = re.compile(r"^---[ \t]*\n")


def set_record_id_text(text: str, record_id: str) -> str:
    """Return record text with ``id`` set to ``record_id`` as the first key.

    Args:
        text: Original record text.
        record_id: Identifier to write.

    Returns:
        Updated record text.

    Raises:
        CatalogIdentifierError: If the edited text no longer parses to the
            expected identifier.
    """
    id_line = f"id: {_yaml_scalar(record_id)}\n"
    stripped = _TOP_LEVEL_ID_LINE.sub("", text, count=1)
    document_start = _DOCUMENT_START.match(stripped)
    if document_start is not None:
        split_at = document_start.end()
        updated = stripped[:split_at] + id_line + stripped[split_at:]
    else:
        updated = id_line + stripped
    _check_written_id(updated, record_id)
    return updated


def write_record_id(file_path: Path, record_id: str) -> None:
    """Set the identifier of a record file in place."""
    text = read_yaml_text(file_path, f"record file {file_path.name}")
    file_path.write_text(set_record_id_text(text, record_id), encoding="utf-8")


def _yaml_scalar(value: str) -> str:
    """Render a token plainly unless YAML would read it as a non-string."""
    payload = parse_yaml_text(f"id: {value}\n").payload
    if isinstance(payload, Mapping) and payload.get("id") == value:
        return value
    return "'" + value.replace("'", "''") + "'"


def _check_written_id(text: str, record_id: str) -> None:
    try:
        payload = parse_yaml_text(text).payload
    except CatalogYamlSyntaxError as error:
        raise CatalogIdentifierError(
            f"Writing id '{record_id}' produced invalid YAML: {error}. "
            "Fix the record's top-level 'id' line by hand."
        ) from error
    if not isinstance(payload, Mapping) or payload.get("id") != record_id:
        raise CatalogIdentifierError(
            f"Writing id '{record_id}' did not take effect. "
            "Make sure the record's 'id' is a single-line top-level key."
        )
