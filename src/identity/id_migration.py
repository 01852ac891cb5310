"""One-time migration from legacy numeric identifiers to tokens.

The migration is operator-invoked and irreversible. It refuses to run a
second time once its mapping artifact exists.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.errors import CatalogIdentifierError
from core.logging_config import get_logger
from core.types import CatalogRecord, MigrationResult
from identity.id_tokens import generate_record_id, is_legacy_record_id
from identity.id_writeback import write_record_id
from ingest.record_files import discover_record_files, load_record

_LOGGER = get_logger(__name__)


def migrate_legacy_ids(data_root: Path, mapping_path: Path) -> MigrationResult:
    """Replace every legacy numeric identifier with a fresh token.

    The old-to-new mapping is written before any record file is touched.

    Args:
        data_root: Data directory.
        mapping_path: Destination of the ``{collection: {old: new}}`` JSON artifact.

    Returns:
        Migration result with the full mapping.

    Raises:
        CatalogIdentifierError: If the mapping artifact already exists,
            no legacy identifiers remain, or two records of one collection
            share a legacy identifier.
    """
    if mapping_path.exists():
        raise CatalogIdentifierError(
            f"ID migration already ran: mapping artifact exists at {mapping_path}. "
            "The migration is one-time; remove the artifact only if you are sure."
        )
    records = [load_record(record_file) for record_file in discover_record_files(data_root)]
    legacy_records = [record for record in records if is_legacy_record_id(record.data.get("id"))]
    if not legacy_records:
        raise CatalogIdentifierError(
            f"No legacy numeric ids found under {data_root}. Nothing to migrate."
        )
    _reject_duplicate_legacy_ids(legacy_records)
    used_ids = {
        str(record.data["id"])
        for record in records
        if record.data.get("id") is not None and not is_legacy_record_id(record.data["id"])
    }
    mapping: dict[str, dict[str, str]] = {}
    planned: list[tuple[CatalogRecord, str]] = []
    for record in legacy_records:
        new_id = generate_record_id(used_ids)
        used_ids.add(new_id)
        mapping.setdefault(record.collection, {})[str(record.data["id"])] = new_id
        planned.append((record, new_id))
    _write_mapping(mapping_path, mapping)
    for record, new_id in planned:
        if record.source_path is not None:
            write_record_id(record.source_path, new_id)
    result = MigrationResult(mapping=mapping, mapping_path=mapping_path)
    _LOGGER.info(
        "ids_migrated",
        migrated=result.migrated_count,
        mapping_path=str(mapping_path),
    )
    return result


def _reject_duplicate_legacy_ids(legacy_records: list[CatalogRecord]) -> None:
    owners: dict[tuple[str, str], list[str]] = {}
    for record in legacy_records:
        key = (record.collection, str(record.data["id"]))
        owners.setdefault(key, []).append(f"{record.collection}/{record.slug}")
    duplicates = [
        f"  id '{legacy_id}': {', '.join(slugs)}"
        for (_, legacy_id), slugs in sorted(owners.items())
        if len(slugs) > 1
    ]
    if duplicates:
        rows = "\n".join(duplicates)
        raise CatalogIdentifierError(
            f"Cannot migrate: legacy ids are shared within a collection:\n{rows}\n"
            "Give each record a distinct id, then rerun the migration."
        )


def _write_mapping(mapping_path: Path, mapping: dict[str, dict[str, str]]) -> None:
    mapping_path.parent.mkdir(parents=True, exist_ok=True)
    mapping_path.write_text(json.dumps(mapping, indent=2) + "\n", encoding="utf-8")
