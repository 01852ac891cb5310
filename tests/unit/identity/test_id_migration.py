"""Unit tests for the one-time legacy identifier migration."""

from __future__ import annotations

import json

import pytest

from core.errors import CatalogIdentifierError
from identity.id_migration import migrate_legacy_ids
from identity.id_tokens import is_valid_record_id
from ingest.record_files import load_all_records
from tests.catalog_fixtures import build_catalog_repo, write_record


def _legacy_repo(tmp_path):
    config = build_catalog_repo(tmp_path)
    write_record(config.data_dir, "software", "old-synth", "id: 7\nname: Old\nmanufacturer: acme\n")
    write_record(config.data_dir, "hardware", "old-box", "id: '12'\nname: Old Box\nmanufacturer: acme\n")
    return config


def test_migration_replaces_legacy_ids_and_writes_mapping(tmp_path) -> None:
    """Legacy ids should become tokens recorded in the mapping artifact."""
    config = _legacy_repo(tmp_path)
    mapping_path = tmp_path / "id-migration-map.json"

    result = migrate_legacy_ids(config.data_dir, mapping_path)
    records = {record.slug: record for record in load_all_records(config.data_dir)}

    assert json.loads(mapping_path.read_text(encoding="utf-8")) == {
        "software": {"7": records["old-synth"].record_id},
        "hardware": {"12": records["old-box"].record_id},
    } and result.migrated_count == 2


def test_migration_keeps_current_tokens(tmp_path) -> None:
    """Records that already use tokens should not be touched."""
    config = _legacy_repo(tmp_path)

    migrate_legacy_ids(config.data_dir, tmp_path / "map.json")
    records = load_all_records(config.data_dir)

    assert all(is_valid_record_id(record.data["id"]) for record in records)


def test_migration_refuses_second_run(tmp_path) -> None:
    """An existing mapping artifact should block the migration."""
    config = _legacy_repo(tmp_path)
    mapping_path = tmp_path / "map.json"
    migrate_legacy_ids(config.data_dir, mapping_path)

    with pytest.raises(CatalogIdentifierError, match="already ran"):
        migrate_legacy_ids(config.data_dir, mapping_path)


def test_migration_refuses_when_nothing_is_legacy(tmp_path) -> None:
    """A dataset without legacy ids should not produce an artifact."""
    config = build_catalog_repo(tmp_path)
    mapping_path = tmp_path / "map.json"

    with pytest.raises(CatalogIdentifierError):
        migrate_legacy_ids(config.data_dir, mapping_path)

    assert not mapping_path.exists()


def test_migration_refuses_shared_legacy_ids(tmp_path) -> None:
    """Two records of one collection sharing a legacy id should block the migration."""
    config = _legacy_repo(tmp_path)
    write_record(config.data_dir, "software", "twin-synth", "id: 7\nname: Twin\nmanufacturer: acme\n")
    mapping_path = tmp_path / "map.json"

    with pytest.raises(CatalogIdentifierError, match="old-synth, software/twin-synth"):
        migrate_legacy_ids(config.data_dir, mapping_path)

    assert not mapping_path.exists()
