"""Full SQLite rebuild of the catalog database.

The build replaces the database file, applies the schema, loads every
record in one transaction and records the dataset version.
"""

from __future__ import annotations

import sqlite3
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Sequence

from core.constants import COLLECTIONS, SCHEMA_VERSION
from core.errors import CatalogStoreError
from core.logging_config import get_logger
from core.types import BuildRequest, BuildSummary, CatalogRecord
from registry.schema_registry import SchemaRegistry
from store.row_mapping import MaterializationContext, TableRow, map_record_rows, table_columns
from store.sqlite_schema import ALL_TABLES, FTS_TABLE, META_TABLE, schema_script

_LOGGER = get_logger(__name__)


def build_catalog_database(
    request: BuildRequest,
    records: Sequence[CatalogRecord],
    registry: SchemaRegistry,
) -> BuildSummary:
    """Rebuild the catalog database from validated records.

    Args:
        request: Target path, version and optimization flag.
        records: Every record of the dataset.
        registry: Vocabularies used for category normalization.

    Returns:
        Build summary with per-collection counts and file size.

    Raises:
        CatalogStoreError: If a record cannot be materialized or SQLite fails.
    """
    ordered = sorted(records, key=lambda record: (COLLECTIONS.index(record.collection), record.slug))
    context = MaterializationContext.from_records(registry, ordered)
    rows: list[TableRow] = []
    for record in ordered:
        rows.extend(map_record_rows(record, context))
    database_path = request.database_path
    _remove_database_files(database_path)
    database_path.parent.mkdir(parents=True, exist_ok=True)
    connection = sqlite3.connect(database_path)
    try:
        connection.execute("PRAGMA foreign_keys = ON")
        connection.executescript(schema_script())
        with connection:
            _insert_rows(connection, rows)
            _write_metadata(connection, request.catalog_version)
        if request.optimize:
            connection.execute("VACUUM")
            connection.execute("ANALYZE")
    except sqlite3.Error as error:
        raise CatalogStoreError(
            f"Failed to build catalog database at {database_path}: {error}. "
            "Fix the reported problem and rerun 'catalog build'."
        ) from error
    finally:
        connection.close()
    record_counts = Counter(record.collection for record in ordered)
    summary = BuildSummary(
        database_path=database_path,
        catalog_version=request.catalog_version,
        record_counts={collection: record_counts.get(collection, 0) for collection in COLLECTIONS},
        size_bytes=database_path.stat().st_size,
    )
    _LOGGER.info(
        "catalog_built",
        database_path=str(database_path),
        catalog_version=request.catalog_version,
        records=len(ordered),
        rows=len(rows),
        size_bytes=summary.size_bytes,
    )
    return summary


def current_timestamp() -> str:
    """Return the UTC timestamp recorded as ``updated_at``."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _insert_rows(connection: sqlite3.Connection, rows: Iterable[TableRow]) -> None:
    grouped: dict[str, list[tuple[object, ...]]] = {}
    for row in rows:
        grouped.setdefault(row.table, []).append(row.values)
    for table_name in [table.name for table in ALL_TABLES] + [FTS_TABLE]:
        values = grouped.get(table_name)
        if not values:
            continue
        columns = table_columns(table_name)
        placeholders = ", ".join("?" for _ in columns)
        connection.executemany(
            f"INSERT INTO {table_name} ({', '.join(columns)}) VALUES ({placeholders})",
            values,
        )


def _write_metadata(connection: sqlite3.Connection, catalog_version: int) -> None:
    connection.executemany(
        f"INSERT INTO {META_TABLE} (key, value) VALUES (?, ?)",
        [
            ("version", str(catalog_version)),
            ("schema_version", str(SCHEMA_VERSION)),
            ("updated_at", current_timestamp()),
        ],
    )


def _remove_database_files(database_path: Path) -> None:
    for suffix in ("", "-wal", "-shm", "-journal"):
        candidate = database_path.with_name(database_path.name + suffix)
        if candidate.exists():
            candidate.unlink()
