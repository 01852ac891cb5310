"""Unit tests for identifier immutability enforcement."""

from __future__ import annotations

import shutil

import pytest

from core.errors import CatalogIdentifierError
from identity.id_immutability import check_id_immutability, enforce_id_immutability
from ingest.baseline import DirectoryBaseline
from tests.catalog_fixtures import ACME_ID, build_catalog_repo, write_record


def _repo_with_baseline(tmp_path):
    config = build_catalog_repo(tmp_path / "repo")
    snapshot_root = tmp_path / "snapshot"
    shutil.copytree(config.data_dir, snapshot_root)
    return config, DirectoryBaseline(snapshot_root)


def test_unchanged_ids_pass(tmp_path) -> None:
    """Edits that keep the id should produce no violation."""
    config, baseline = _repo_with_baseline(tmp_path)
    write_record(config.data_dir, "manufacturers", "acme", {"id": ACME_ID, "name": "Acme Audio Inc"})

    assert check_id_immutability(config.data_dir, baseline) == []


def test_changed_id_names_file_and_both_values(tmp_path) -> None:
    """A changed id should be reported with its old and new value."""
    config, baseline = _repo_with_baseline(tmp_path)
    write_record(config.data_dir, "manufacturers", "acme", {"id": "X" * 21, "name": "Acme Audio"})

    violations = check_id_immutability(config.data_dir, baseline)

    assert violations[0].describe() == (
        f"manufacturers/acme.yaml: ID was changed from '{ACME_ID}' to '{'X' * 21}'. "
        "IDs are immutable once assigned."
    )


def test_removed_id_is_a_violation(tmp_path) -> None:
    """Dropping an assigned id should count as a change."""
    config, baseline = _repo_with_baseline(tmp_path)
    write_record(config.data_dir, "manufacturers", "acme", {"name": "Acme Audio"})

    violations = check_id_immutability(config.data_dir, baseline)

    assert violations[0].new_id is None


def test_new_records_are_not_checked(tmp_path) -> None:
    """Added records have no baseline id to protect."""
    config, baseline = _repo_with_baseline(tmp_path)
    write_record(config.data_dir, "software", "fresh", {"id": "Y" * 21, "name": "Fresh"})

    assert check_id_immutability(config.data_dir, baseline) == []


def test_enforce_raises_listing_every_violation(tmp_path) -> None:
    """Enforcement should fail naming each offending file."""
    config, baseline = _repo_with_baseline(tmp_path)
    write_record(config.data_dir, "manufacturers", "acme", {"id": "X" * 21, "name": "Acme"})
    write_record(config.data_dir, "manufacturers", "beta", {"id": "Z" * 21, "name": "Beta"})

    with pytest.raises(CatalogIdentifierError) as error_info:
        enforce_id_immutability(config.data_dir, baseline)

    assert "manufacturers/acme.yaml" in str(error_info.value) and "manufacturers/beta.yaml" in str(
        error_info.value
    )


def test_undecodable_current_file_is_skipped(tmp_path) -> None:
    """A modified file that is not UTF-8 should be skipped, not abort the check."""
    config, baseline = _repo_with_baseline(tmp_path)
    (config.data_dir / "manufacturers" / "acme.yaml").write_bytes(b"id: \xff\xfe\n")

    assert check_id_immutability(config.data_dir, baseline) == []
