"""Integration test: patching the previous build equals a full rebuild."""

from __future__ import annotations

import shutil
import sqlite3
from pathlib import Path

import pytest

from core.types import BuildRequest, PatchRequest
from ingest.baseline import DirectoryBaseline
from store.catalog_sdk import CatalogClient
from store.sqlite_schema import ALL_TABLES, FTS_COLUMNS, FTS_TABLE, META_TABLE
from tests.catalog_fixtures import BOX_ID, base_records, build_catalog_repo, commit_and_tag, write_record


def _table_rows(database_path: Path) -> dict[str, list[tuple[object, ...]]]:
    with sqlite3.connect(database_path) as connection:
        snapshot = {
            table.name: sorted(connection.execute(f"SELECT * FROM {table.name}").fetchall(), key=repr)
            for table in ALL_TABLES
        }
        snapshot[FTS_TABLE] = sorted(
            connection.execute(f"SELECT {', '.join(FTS_COLUMNS)} FROM {FTS_TABLE}").fetchall(),
            key=repr,
        )
        snapshot[META_TABLE] = sorted(
            connection.execute(f"SELECT key, value FROM {META_TABLE} WHERE key != 'updated_at'").fetchall()
        )
    return snapshot


def _edit_dataset(data_dir: Path) -> None:
    records = base_records()
    acme = records["manufacturers"]["acme"]
    acme["name"] = "Acme Instruments"
    write_record(data_dir, "manufacturers", "acme", acme)
    (data_dir / "manufacturers" / "beta.yaml").unlink()
    write_record(data_dir, "manufacturers", "gamma", {"id": "GammaManufacturer0003", "name": "Gamma Works"})

    synth = records["software"]["acme-synth"]
    synth["categories"] = ["sampler", "fx"]
    synth["versions"].append({"name": "2.0", "releaseDate": "2023-02-14", "preRelease": True})
    synth.pop("prices")
    write_record(data_dir, "software", "acme-synth", synth)
    write_record(
        data_dir,
        "software",
        "new-synth",
        {"id": "NewSynthSoftware00001", "name": "New Synth", "manufacturer": "acme", "formats": ["clap"]},
    )

    box = records["hardware"]["acme-box"]
    box["io"] = box["io"][:1]
    box["revisions"][0]["io"] = [
        {
            "name": "Phones",
            "signalFlow": "output",
            "category": "audio",
            "type": "headphone",
            "connection": "jack-3.5mm",
        }
    ]
    box.pop("translations")
    (data_dir / "hardware" / "acme-box.yaml").unlink()
    write_record(data_dir, "hardware", "acme-box-mk2", box)
    write_record(
        data_dir,
        "hardware",
        "gamma-drum",
        {
            "id": "GammaDrumHardware0004",
            "name": "Gamma Drum",
            "manufacturer": "gamma",
            "categories": ["drum-machine"],
        },
    )


def test_patched_database_matches_full_rebuild(tmp_path) -> None:
    """Every table and the search index should converge after patching."""
    config = build_catalog_repo(tmp_path / "repo")
    client = CatalogClient(config)
    previous_build = client.build(BuildRequest(database_path=tmp_path / "v1.sqlite", catalog_version=1))
    shutil.copytree(config.data_dir, tmp_path / "snapshot")
    _edit_dataset(config.data_dir)
    patched_path = tmp_path / "patched.sqlite"
    shutil.copyfile(previous_build.database_path, patched_path)

    rebuilt = client.build(BuildRequest(database_path=tmp_path / "v2.sqlite", catalog_version=2))
    result = client.generate_patch(
        PatchRequest(from_version=1, to_version=2, output_dir=tmp_path / "patches"),
        DirectoryBaseline(tmp_path / "snapshot"),
    )
    client.apply_patch(result.patch_path, patched_path)

    assert _table_rows(patched_path) == _table_rows(rebuilt.database_path)


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_git_tag_patch_matches_full_rebuild(tmp_path) -> None:
    """Patching from the release tag should converge, untracked new records included."""
    repo_root = tmp_path / "repo"
    config = build_catalog_repo(repo_root)
    commit_and_tag(repo_root, "v1")
    client = CatalogClient(config)
    previous_build = client.build(BuildRequest(database_path=tmp_path / "v1.sqlite", catalog_version=1))
    _edit_dataset(config.data_dir)
    patched_path = tmp_path / "patched.sqlite"
    shutil.copyfile(previous_build.database_path, patched_path)

    rebuilt = client.build(BuildRequest(database_path=tmp_path / "v2.sqlite", catalog_version=2))
    result = client.generate_patch(
        PatchRequest(from_version=1, to_version=2, output_dir=tmp_path / "patches")
    )
    client.apply_patch(result.patch_path, patched_path)

    assert _table_rows(patched_path) == _table_rows(rebuilt.database_path)


def test_renamed_record_keeps_its_identifier(tmp_path) -> None:
    """A slug rename should reuse the id and drop the old slug."""
    config = build_catalog_repo(tmp_path / "repo")
    client = CatalogClient(config)
    build = client.build(BuildRequest(database_path=tmp_path / "v1.sqlite", optimize=False))
    shutil.copytree(config.data_dir, tmp_path / "snapshot")
    _edit_dataset(config.data_dir)
    result = client.generate_patch(
        PatchRequest(from_version=1, to_version=2, output_dir=tmp_path / "patches"),
        DirectoryBaseline(tmp_path / "snapshot"),
    )

    client.apply_patch(result.patch_path, build.database_path)

    with sqlite3.connect(build.database_path) as connection:
        rows = connection.execute("SELECT id, slug FROM hardware WHERE id = ?", (BOX_ID,)).fetchall()
    assert rows == [(BOX_ID, "acme-box-mk2")]
