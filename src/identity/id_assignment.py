"""Merge-time identifier assignment.

Every record without an ``id`` receives a fresh token that is unused
across the whole dataset. Running the pass twice assigns nothing the
second time.
"""

from __future__ import annotations

from pathlib import Path

from core.logging_config import get_logger
from core.types import IdAssignment, IdAssignmentReport
from identity.id_tokens import generate_record_id
from identity.id_writeback import write_record_id
from ingest.record_files import discover_record_files, load_record

_LOGGER = get_logger(__name__)


def assign_missing_ids(data_root: Path) -> IdAssignmentReport:
    """Assign identifiers to every record lacking one.

    Args:
        data_root: Data directory.

    Returns:
        Report of assigned identifiers and skipped records.

    Raises:
        CatalogIngestError: If any record cannot be read or parsed.
        CatalogIdentifierError: If an identifier cannot be written back.
    """
    records = [load_record(record_file) for record_file in discover_record_files(data_root)]
    used_ids = {str(record.data["id"]) for record in records if record.data.get("id") is not None}
    assigned: list[IdAssignment] = []
    skipped_count = 0
    for record in records:
        if record.data.get("id") is not None:
            skipped_count += 1
            continue
        record_id = generate_record_id(used_ids)
        used_ids.add(record_id)
        if record.source_path is not None:
            write_record_id(record.source_path, record_id)
        assigned.append(IdAssignment(record.collection, record.slug, record_id))
        _LOGGER.info(
            "record_id_assigned",
            collection=record.collection,
            slug=record.slug,
            record_id=record_id,
        )
    _LOGGER.info("ids_assigned", assigned=len(assigned), skipped=skipped_count)
    return IdAssignmentReport(assigned=tuple(assigned), skipped_count=skipped_count)
