"""Incremental SQL patch generation and application.

A patch upgrades a database built at one dataset version to the next
without a full rebuild. It is plain SQL: one transaction with deferred
foreign keys, deletions first, then inserts and updates in collection
order, closed by a metadata version bump. Applying the patch to the
previous build yields the same rows as a full rebuild of the new data.
"""

from __future__ import annotations

import re
import sqlite3
from pathlib import Path

from core.config import CatalogConfig
from core.constants import COLLECTIONS, MANUFACTURERS
from core.errors import CatalogIngestError, CatalogStoreError
from core.logging_config import get_logger
from core.types import CatalogRecord, PatchRequest, PatchResult, RecordChange
from ingest.baseline import Baseline, DirectoryBaseline, GitBaseline
from ingest.record_files import discover_record_files, load_record, record_from_text
from ingest.yaml_documents import read_yaml_text
from registry.schema_registry import SchemaRegistry
from store.full_build import current_timestamp
from store.row_mapping import MaterializationContext, TableRow, map_record_rows
from store.sqlite_schema import FTS_TABLE, META_TABLE, child_tables, parent_table
from transforms.sql_literals import escape_sql

_LOGGER = get_logger(__name__)

_PATCH_HEADER_PATTERN = re.compile(r"^-- Catalog patch: v(\d+) → v(\d+)$", re.MULTILINE)


def patch_file_name(from_version: int, to_version: int) -> str:
    return f"patch-{from_version}-{to_version}.sql"


def baseline_for_request(request: PatchRequest, config: CatalogConfig) -> Baseline:
    """Resolve the baseline a patch request compares against.

    A snapshot directory wins over git; the default git ref is the
    release tag ``v<from_version>``.
    """
    if request.baseline_dir is not None:
        return DirectoryBaseline(request.baseline_dir)
    ref = request.baseline_ref or f"v{request.from_version}"
    return GitBaseline(config.repo_root, ref, config.data_dir)


def generate_patch(
    request: PatchRequest,
    config: CatalogConfig,
    registry: SchemaRegistry,
    baseline: Baseline | None = None,
) -> PatchResult:
    """Write the SQL patch between the baseline and the working tree.

    Args:
        request: Versions, output directory and baseline selection.
        config: Runtime configuration.
        registry: Vocabularies used for category normalization.
        baseline: Optional baseline overriding the request's selection.

    Returns:
        Patch result; ``patch_path`` is None when nothing changed.

    Raises:
        CatalogStoreError: If the versions are inconsistent or a record
            cannot be materialized.
        CatalogIngestError: If the baseline cannot be read.
    """
    if request.to_version <= request.from_version:
        raise CatalogStoreError(
            f"Patch target version {request.to_version} must be greater than "
            f"{request.from_version}. Pass a higher --to version."
        )
    active_baseline = baseline or baseline_for_request(request, config)
    changes = active_baseline.changes(config.data_dir)
    if not changes:
        _LOGGER.info("patch_not_needed", from_version=request.from_version)
        return PatchResult(patch_path=None, changes=())
    context = MaterializationContext.from_records(registry, _load_manufacturers(config.data_dir))
    statements: list[str] = []
    body: list[str] = []
    skipped: list[RecordChange] = []
    for change in _patch_order(changes):
        change_statements = _change_statements(change, config.data_dir, context, active_baseline)
        if change_statements is None:
            skipped.append(change)
            continue
        body.append(f"-- {change.change_type.upper()}: {change.collection}/{change.slug}")
        body.extend(change_statements)
        body.append("")
        statements.extend(change_statements)
    metadata = [
        f"UPDATE {META_TABLE} SET value = {escape_sql(str(request.to_version))} WHERE key = 'version';",
        f"UPDATE {META_TABLE} SET value = {escape_sql(current_timestamp())} WHERE key = 'updated_at';",
    ]
    statements.extend(metadata)
    lines = [
        f"-- Catalog patch: v{request.from_version} → v{request.to_version}",
        f"-- Generated: {current_timestamp()}",
        f"-- Changes: {len(changes)}",
        "",
        "PRAGMA foreign_keys = ON;",
        "BEGIN TRANSACTION;",
        "PRAGMA defer_foreign_keys = ON;",
        "",
        *body,
        "-- Update catalog version",
        *metadata,
        "",
        "COMMIT;",
    ]
    request.output_dir.mkdir(parents=True, exist_ok=True)
    patch_path = request.output_dir / patch_file_name(request.from_version, request.to_version)
    patch_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    _LOGGER.info(
        "patch_generated",
        patch_path=str(patch_path),
        changes=len(changes),
        skipped=len(skipped),
        statements=len(statements),
    )
    return PatchResult(
        patch_path=patch_path,
        changes=tuple(change for change in changes if change not in skipped),
        skipped=tuple(skipped),
        statement_count=len(statements),
    )


def apply_patch(database_path: Path, patch_path: Path) -> int:
    """Apply a patch script to a database atomically.

    Args:
        database_path: Database built at the patch's source version.
        patch_path: Patch file produced by ``generate_patch``.

    Returns:
        Dataset version recorded after the patch.

    Raises:
        CatalogStoreError: If a file is missing, the database version does
            not match the patch, or any statement fails.
    """
    if not database_path.is_file():
        raise CatalogStoreError(
            f"Catalog database not found at {database_path}. Run 'catalog build' first."
        )
    if not patch_path.is_file():
        raise CatalogStoreError(
            f"Patch file not found at {patch_path}. Run 'catalog patch' to generate it."
        )
    script = patch_path.read_text(encoding="utf-8")
    header = _PATCH_HEADER_PATTERN.search(script)
    connection = sqlite3.connect(database_path)
    try:
        current_version = _read_version(connection)
        if header is not None and current_version != int(header.group(1)):
            raise CatalogStoreError(
                f"Patch {patch_path.name} upgrades v{header.group(1)} but the database is at "
                f"v{current_version}. Apply patches in order or rebuild the database."
            )
        connection.execute("PRAGMA foreign_keys = ON")
        connection.executescript(script)
        new_version = _read_version(connection)
    except sqlite3.Error as error:
        if connection.in_transaction:
            connection.rollback()
        raise CatalogStoreError(
            f"Failed to apply patch {patch_path.name} to {database_path}: {error}. "
            "The database was left unchanged; rebuild it with 'catalog build'."
        ) from error
    finally:
        connection.close()
    _LOGGER.info(
        "patch_applied",
        database_path=str(database_path),
        patch_path=str(patch_path),
        catalog_version=new_version,
    )
    return new_version


def _patch_order(changes: tuple[RecordChange, ...]) -> list[RecordChange]:
    """Order deletions first so a renamed record can reuse its identifier."""
    return sorted(
        changes,
        key=lambda change: (
            0 if change.change_type == "deleted" else 1,
            COLLECTIONS.index(change.collection),
            change.relative_path,
        ),
    )


def _load_manufacturers(data_root: Path) -> list[CatalogRecord]:
    records: list[CatalogRecord] = []
    for record_file in discover_record_files(data_root):
        if record_file.collection != MANUFACTURERS:
            continue
        try:
            records.append(load_record(record_file))
        except CatalogIngestError as error:
            _LOGGER.warning(
                "patch_record_skipped",
                relative_path=record_file.relative_name,
                reason=str(error),
            )
    return records


def _change_statements(
    change: RecordChange,
    data_root: Path,
    context: MaterializationContext,
    baseline: Baseline,
) -> list[str] | None:
    if change.change_type == "deleted":
        return _delete_statements(change)
    try:
        record = _load_changed_record(change, data_root)
    except CatalogIngestError as error:
        _LOGGER.warning(
            "patch_record_skipped",
            relative_path=change.relative_path,
            reason=str(error),
        )
        return None
    rows = map_record_rows(record, context)
    if change.change_type == "added":
        return [_insert_statement(row) for row in rows]
    statements = _replace_statements(record, rows)
    if record.collection == MANUFACTURERS and _manufacturer_renamed(change, record, baseline):
        statements.append(
            f"UPDATE {FTS_TABLE} SET manufacturer_name = {escape_sql(record.name)} "
            f"WHERE manufacturer_id = {escape_sql(record.record_id)} "
            f"AND collection != {escape_sql(MANUFACTURERS)};"
        )
    return statements


def _load_changed_record(change: RecordChange, data_root: Path) -> CatalogRecord:
    """Load the working-tree record named by a change.

    Raises:
        CatalogIngestError: If the file cannot be read or parsed.
    """
    file_path = data_root / change.relative_path
    text = read_yaml_text(file_path, f"record file {change.relative_path}")
    return record_from_text(text, change.collection, change.slug, file_path)


def _delete_statements(change: RecordChange) -> list[str]:
    """Delete by slug; child rows follow through ON DELETE CASCADE."""
    table = parent_table(change.collection).name
    slug = escape_sql(change.slug)
    return [
        f"DELETE FROM {FTS_TABLE} WHERE slug = {slug} AND collection = {escape_sql(change.collection)};",
        f"DELETE FROM {table} WHERE slug = {slug};",
    ]


def _replace_statements(record: CatalogRecord, rows: list[TableRow]) -> list[str]:
    record_id = escape_sql(record.record_id)
    statements = [
        f"DELETE FROM {table.name} WHERE {table.owner_column} = {record_id};"
        for table in child_tables(record.collection)
    ]
    statements.append(
        f"DELETE FROM {FTS_TABLE} WHERE id = {record_id} "
        f"AND collection = {escape_sql(record.collection)};"
    )
    parent_row, child_rows = rows[0], rows[1:]
    assignments = ", ".join(
        f"{column} = {escape_sql(value)}"
        for column, value in zip(parent_row.columns, parent_row.values)
        if column != "id"
    )
    statements.append(f"UPDATE {parent_row.table} SET {assignments} WHERE id = {record_id};")
    statements.extend(_insert_statement(row) for row in child_rows)
    return statements


def _insert_statement(row: TableRow) -> str:
    values = ", ".join(escape_sql(value) for value in row.values)
    return f"INSERT INTO {row.table} ({', '.join(row.columns)}) VALUES ({values});"


def _manufacturer_renamed(change: RecordChange, record: CatalogRecord, baseline: Baseline) -> bool:
    previous_text = baseline.read_text(change.relative_path)
    if previous_text is None:
        return True
    try:
        previous = record_from_text(previous_text, change.collection, change.slug)
    except CatalogIngestError:
        return True
    return previous.name != record.name


def _read_version(connection: sqlite3.Connection) -> int:
    row = connection.execute(f"SELECT value FROM {META_TABLE} WHERE key = 'version'").fetchone()
    if row is None:
        raise CatalogStoreError(
            "Catalog database has no version metadata. Rebuild it with 'catalog build'."
        )
    return int(row[0])
