"""Record file discovery and loading.

This module locates record files under the data directory and parses
them into typed catalog records for validation and materialization.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, cast

from core.constants import COLLECTIONS, RECORD_FILE_EXTENSIONS
from core.errors import CatalogIngestError, CatalogYamlSyntaxError
from core.types import CatalogRecord, Collection, RecordFile
from ingest.yaml_documents import parse_yaml_text, read_yaml_text


def discover_record_files(data_root: Path) -> tuple[RecordFile, ...]:
    """List record files in collection order, then by filename.

    Args:
        data_root: Directory with one sub-directory per collection.

    Returns:
        Discovered record files. Missing collection directories are empty.
    """
    record_files: list[RecordFile] = []
    for collection in COLLECTIONS:
        collection_dir = data_root / collection
        if not collection_dir.is_dir():
            continue
        for file_path in sorted(collection_dir.iterdir()):
            if file_path.is_file() and file_path.suffix in RECORD_FILE_EXTENSIONS:
                record_files.append(
                    RecordFile(
                        collection=cast(Collection, collection),
                        slug=file_path.stem,
                        path=file_path,
                    )
                )
    return tuple(record_files)


def record_file_from_relative_path(data_root: Path, relative_path: str) -> RecordFile | None:
    """Map ``<collection>/<slug>.yaml`` to a record file, or None when not a record path."""
    parts = Path(relative_path).parts
    if len(parts) != 2 or parts[0] not in COLLECTIONS:
        return None
    file_name = Path(parts[1])
    if file_name.suffix not in RECORD_FILE_EXTENSIONS:
        return None
    return RecordFile(
        collection=cast(Collection, parts[0]),
        slug=file_name.stem,
        path=data_root / parts[0] / parts[1],
    )


def read_record_text(record_file: RecordFile) -> str:
    """Read raw record text.

    Raises:
        CatalogIngestError: If the file cannot be read.
        CatalogYamlSyntaxError: If the file is not valid UTF-8.
    """
    return read_yaml_text(record_file.path, f"record file {record_file.relative_name}")


def record_from_text(
    text: str,
    collection: Collection,
    slug: str,
    source_path: Path | None = None,
) -> CatalogRecord:
    """Parse record text into a catalog record.

    Args:
        text: Raw YAML record text.
        collection: Owning collection.
        slug: Authoritative slug.
        source_path: Optional originating file path.

    Returns:
        Parsed catalog record.

    Raises:
        CatalogIngestError: If text is not YAML or not a mapping.
    """
    label = f"{collection}/{slug}"
    try:
        payload = parse_yaml_text(text).payload
    except CatalogYamlSyntaxError as error:
        raise CatalogIngestError(
            f"Failed to parse record {label}: {error}. Fix YAML syntax and retry."
        ) from error
    if not isinstance(payload, Mapping):
        raise CatalogIngestError(
            f"Record {label} must be a YAML mapping, got {type(payload).__name__}."
        )
    return CatalogRecord(
        collection=collection,
        slug=slug,
        data=dict(payload),
        source_path=source_path,
    )


def load_record(record_file: RecordFile) -> CatalogRecord:
    """Read and parse one record file."""
    text = read_record_text(record_file)
    return record_from_text(text, record_file.collection, record_file.slug, record_file.path)


def load_all_records(data_root: Path) -> tuple[CatalogRecord, ...]:
    """Load every record under a data directory.

    Args:
        data_root: Data directory.

    Returns:
        Records in collection order.

    Raises:
        CatalogIngestError: If any record cannot be read or parsed.
    """
    return tuple(load_record(record_file) for record_file in discover_record_files(data_root))
