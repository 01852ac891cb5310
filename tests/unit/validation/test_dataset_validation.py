"""Unit tests for dataset-wide validation."""

from __future__ import annotations

import shutil

from ingest.baseline import DirectoryBaseline
from tests.catalog_fixtures import ACME_ID, SYNTH_ID, build_catalog_repo, write_record
from validation.dataset_validation import validate_dataset


def _issue_codes(report, relative_path: str) -> list[str]:
    for file in report.files:
        if file.relative_path == relative_path:
            return [issue.code.value for issue in file.issues]
    return []


def test_base_dataset_is_valid(tmp_path) -> None:
    """The fixture dataset should pass with full statistics."""
    report = validate_dataset(build_catalog_repo(tmp_path))

    assert (report.valid, report.stats.total_records, report.stats.with_ids, report.stats.locales_used) == (
        True,
        4,
        4,
        ("de", "fr"),
    )


def test_missing_id_is_warning_by_default(tmp_path) -> None:
    """A record without id should warn unless ids are required."""
    config = build_catalog_repo(tmp_path)
    write_record(config.data_dir, "software", "new-synth", {"name": "New", "manufacturer": "acme"})

    report = validate_dataset(config)

    assert (report.valid, report.warning_count, _issue_codes(report, "software/new-synth.yaml")) == (
        True,
        1,
        ["E401"],
    )


def test_missing_id_is_error_when_required(tmp_path) -> None:
    """Build-time validation should treat a missing id as an error."""
    config = build_catalog_repo(tmp_path)
    write_record(config.data_dir, "software", "new-synth", {"name": "New", "manufacturer": "acme"})

    report = validate_dataset(config, require_ids=True)

    assert (report.valid, report.error_count) == (False, 1)


def test_slug_shared_across_collections_flags_both_files(tmp_path) -> None:
    """A slug used in two collections should be E201 on both files."""
    config = build_catalog_repo(tmp_path)
    write_record(
        config.data_dir,
        "software",
        "acme",
        {"id": "AcmeDuplicateSlug0001", "name": "Acme", "manufacturer": "acme"},
    )

    report = validate_dataset(config)

    assert (
        _issue_codes(report, "manufacturers/acme.yaml"),
        _issue_codes(report, "software/acme.yaml"),
    ) == (["E201"], ["E201"])


def test_duplicate_ids_flag_every_owner(tmp_path) -> None:
    """Two records sharing an id should both be E402."""
    config = build_catalog_repo(tmp_path)
    write_record(
        config.data_dir,
        "software",
        "other-synth",
        {"id": SYNTH_ID, "name": "Other", "manufacturer": "acme"},
    )

    report = validate_dataset(config)

    assert (
        _issue_codes(report, "software/acme-synth.yaml"),
        _issue_codes(report, "software/other-synth.yaml"),
        report.stats.duplicate_ids,
    ) == (["E402"], ["E402"], 1)


def test_legacy_id_points_at_migration(tmp_path) -> None:
    """A numeric id should be E400 with the migration hint."""
    config = build_catalog_repo(tmp_path)
    write_record(config.data_dir, "software", "old-synth", "id: 42\nname: Old\nmanufacturer: acme\n")

    report = validate_dataset(config)

    issues = [file for file in report.files if file.relative_path == "software/old-synth.yaml"][0].issues
    assert (issues[0].code.value, issues[0].line) == ("E400", 1) and "migrate-ids" in issues[0].message


def test_changed_id_against_baseline_is_reported(tmp_path) -> None:
    """Changing an assigned id should be E403 when a baseline is given."""
    config = build_catalog_repo(tmp_path / "repo")
    shutil.copytree(config.data_dir, tmp_path / "snapshot")
    write_record(config.data_dir, "manufacturers", "acme", {"id": "X" * 21, "name": "Acme Audio"})

    report = validate_dataset(config, baseline=DirectoryBaseline(tmp_path / "snapshot"))

    issue = [file for file in report.files if file.relative_path == "manufacturers/acme.yaml"][0].issues[0]
    assert (issue.code.value, report.baseline_checked) == ("E403", True) and ACME_ID in issue.message


def test_syntax_error_does_not_stop_other_records(tmp_path) -> None:
    """A broken file should be reported while the rest still validate."""
    config = build_catalog_repo(tmp_path)
    write_record(config.data_dir, "software", "broken", "name: [Broken\n")

    report = validate_dataset(config)

    assert (
        _issue_codes(report, "software/broken.yaml"),
        report.stats.total_counts["software"],
        report.stats.valid_counts["hardware"],
    ) == (["E110"], 2, 1)


def test_undecodable_file_does_not_stop_other_records(tmp_path) -> None:
    """A file that is not UTF-8 should get one E110 issue while the rest still validate."""
    config = build_catalog_repo(tmp_path)
    (config.data_dir / "software" / "broken.yaml").write_bytes(b"name: \xff\xfe bad\n")

    report = validate_dataset(config)

    assert (
        _issue_codes(report, "software/broken.yaml"),
        report.stats.total_counts["software"],
        report.stats.valid_counts["hardware"],
    ) == (["E110"], 2, 1)
