"""Unit tests for incremental patch generation and application."""

from __future__ import annotations

import shutil
import sqlite3

import pytest

from core.errors import CatalogStoreError
from core.types import BuildRequest, PatchRequest
from ingest.baseline import DirectoryBaseline
from ingest.record_files import load_all_records
from registry.schema_registry import SchemaRegistry
from store.full_build import build_catalog_database
from store.patch_builder import apply_patch, baseline_for_request, generate_patch
from tests.catalog_fixtures import ACME_ID, base_records, build_catalog_repo, write_record

_NEW_SYNTH = {"id": "NewSynthSoftware00001", "name": "New", "manufacturer": "acme"}


@pytest.fixture
def workspace(tmp_path):
    """Repository at v1 with a built database and a data snapshot."""
    config = build_catalog_repo(tmp_path / "repo")
    registry = SchemaRegistry.load(config.schema_dir)
    database_path = tmp_path / "catalog.sqlite"
    build_catalog_database(
        BuildRequest(database_path=database_path, catalog_version=1, optimize=False),
        load_all_records(config.data_dir),
        registry,
    )
    shutil.copytree(config.data_dir, tmp_path / "snapshot")
    return config, registry, database_path, DirectoryBaseline(tmp_path / "snapshot")


def _request(tmp_path, from_version: int = 1, to_version: int = 2) -> PatchRequest:
    return PatchRequest(from_version=from_version, to_version=to_version, output_dir=tmp_path / "patches")


def test_no_changes_writes_no_patch(workspace, tmp_path) -> None:
    """An unchanged dataset should not produce a patch file."""
    config, registry, _, baseline = workspace

    result = generate_patch(_request(tmp_path), config, registry, baseline)

    assert (result.patch_path, result.changes, (tmp_path / "patches").exists()) == (None, (), False)


def test_target_version_must_increase(workspace, tmp_path) -> None:
    """A non-increasing version pair should be rejected."""
    config, registry, _, baseline = workspace

    with pytest.raises(CatalogStoreError, match="must be greater"):
        generate_patch(_request(tmp_path, 2, 2), config, registry, baseline)


def test_patch_script_layout(workspace, tmp_path) -> None:
    """The script should open with the header and run in one transaction."""
    config, registry, _, baseline = workspace
    write_record(config.data_dir, "software", "new-synth", _NEW_SYNTH)

    result = generate_patch(_request(tmp_path), config, registry, baseline)

    lines = result.patch_path.read_text(encoding="utf-8").splitlines()
    assert (lines[0], lines[4:7], lines[-1], result.patch_path.name) == (
        "-- Catalog patch: v1 → v2",
        ["PRAGMA foreign_keys = ON;", "BEGIN TRANSACTION;", "PRAGMA defer_foreign_keys = ON;"],
        "COMMIT;",
        "patch-1-2.sql",
    )


def test_deletions_come_before_additions(workspace, tmp_path) -> None:
    """Deleted records should be removed before anything is inserted."""
    config, registry, _, baseline = workspace
    write_record(config.data_dir, "manufacturers", "gamma", {"id": "GammaManufacturer0003", "name": "Gamma"})
    (config.data_dir / "hardware" / "acme-box.yaml").unlink()

    result = generate_patch(_request(tmp_path), config, registry, baseline)

    script = result.patch_path.read_text(encoding="utf-8")
    assert script.index("-- DELETED: hardware/acme-box") < script.index("-- ADDED: manufacturers/gamma")


def test_unreadable_record_is_skipped(workspace, tmp_path) -> None:
    """A changed file that cannot be parsed should be skipped, not fatal."""
    config, registry, _, baseline = workspace
    write_record(config.data_dir, "software", "broken", "name: [Broken\n")
    write_record(config.data_dir, "software", "new-synth", _NEW_SYNTH)

    result = generate_patch(_request(tmp_path), config, registry, baseline)

    assert ([change.slug for change in result.skipped], [change.slug for change in result.changes]) == (
        ["broken"],
        ["new-synth"],
    )


def test_apply_patch_updates_rows_and_version(workspace, tmp_path) -> None:
    """Applying a patch should change rows and bump the version."""
    config, registry, database_path, baseline = workspace
    record = base_records()["software"]["acme-synth"]
    record["name"] = "Acme Synth Pro"
    write_record(config.data_dir, "software", "acme-synth", record)
    result = generate_patch(_request(tmp_path), config, registry, baseline)

    version = apply_patch(database_path, result.patch_path)

    with sqlite3.connect(database_path) as connection:
        name = connection.execute("SELECT name FROM software WHERE slug = 'acme-synth'").fetchone()[0]
        versions = connection.execute("SELECT COUNT(*) FROM software_versions").fetchone()[0]
    assert (version, name, versions) == (2, "Acme Synth Pro", 1)


def test_manufacturer_rename_reaches_product_search_rows(workspace, tmp_path) -> None:
    """Renaming a manufacturer should update its products' search rows."""
    config, registry, database_path, baseline = workspace
    renamed = {**base_records()["manufacturers"]["acme"], "name": "Acme Instruments"}
    write_record(config.data_dir, "manufacturers", "acme", renamed)
    result = generate_patch(_request(tmp_path), config, registry, baseline)

    apply_patch(database_path, result.patch_path)

    with sqlite3.connect(database_path) as connection:
        names = connection.execute(
            "SELECT DISTINCT manufacturer_name FROM catalog_fts WHERE manufacturer_id = ?",
            (ACME_ID,),
        ).fetchall()
    assert names == [("Acme Instruments",)]


def test_apply_rejects_version_mismatch(workspace, tmp_path) -> None:
    """A patch for another source version should not be applied."""
    config, registry, database_path, baseline = workspace
    write_record(config.data_dir, "manufacturers", "gamma", {"id": "GammaManufacturer0003", "name": "Gamma"})
    result = generate_patch(_request(tmp_path, 4, 5), config, registry, baseline)

    with pytest.raises(CatalogStoreError, match="upgrades v4 but the database is at v1"):
        apply_patch(database_path, result.patch_path)


def test_failed_patch_leaves_database_unchanged(workspace, tmp_path) -> None:
    """A failing statement should roll the whole patch back."""
    _, _, database_path, _ = workspace
    patch_path = tmp_path / "patch-1-2.sql"
    patch_path.write_text(
        "-- Catalog patch: v1 → v2\n"
        "PRAGMA foreign_keys = ON;\n"
        "BEGIN TRANSACTION;\n"
        "UPDATE catalog_meta SET value = '2' WHERE key = 'version';\n"
        "INSERT INTO missing_table VALUES (1);\n"
        "COMMIT;\n",
        encoding="utf-8",
    )

    with pytest.raises(CatalogStoreError, match="left unchanged"):
        apply_patch(database_path, patch_path)

    with sqlite3.connect(database_path) as connection:
        version = connection.execute("SELECT value FROM catalog_meta WHERE key = 'version'").fetchone()[0]
    assert version == "1"


def test_apply_requires_existing_database(tmp_path) -> None:
    """Applying to a missing database should point at the build command."""
    with pytest.raises(CatalogStoreError, match="catalog build"):
        apply_patch(tmp_path / "missing.sqlite", tmp_path / "patch.sql")


def test_baseline_defaults_to_release_tag(tmp_path) -> None:
    """Without a snapshot the baseline should be the v<from> git tag."""
    config = build_catalog_repo(tmp_path)

    baseline = baseline_for_request(_request(tmp_path, 3, 4), config)

    assert baseline.ref == "v3"
