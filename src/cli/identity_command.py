"""Identifier lifecycle command wiring for catalog CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any

from cli.baseline_args import add_baseline_arguments, baseline_from_args
from store.catalog_sdk import CatalogClient


def add_assign_ids_command(subparsers: Any) -> None:
    """Register assign-ids subcommand."""
    subparsers.add_parser("assign-ids", help="Assign ids to records that lack one")


def add_check_ids_command(subparsers: Any) -> None:
    """Register check-ids subcommand."""
    parser = subparsers.add_parser(
        "check-ids",
        help="Fail when an assigned id changed since the baseline",
    )
    add_baseline_arguments(parser, help_suffix="(default: HEAD)")


def add_migrate_ids_command(subparsers: Any) -> None:
    """Register migrate-ids subcommand."""
    parser = subparsers.add_parser(
        "migrate-ids",
        help="One-time replacement of legacy numeric ids with tokens",
    )
    parser.add_argument(
        "--mapping",
        help="Old to new id mapping output; defaults to id-migration-map.json",
    )


def run_assign_ids_command(client: CatalogClient, args: argparse.Namespace) -> int:
    """Assign missing ids and print each new assignment."""
    report = client.assign_ids()
    for assignment in report.assigned:
        print(f"assigned={assignment.collection}/{assignment.slug}\tid={assignment.record_id}")
    print(f"assigned_count={len(report.assigned)}")
    print(f"skipped_count={report.skipped_count}")
    return 0


def run_check_ids_command(client: CatalogClient, args: argparse.Namespace) -> int:
    """Compare ids with the baseline and print every violation."""
    baseline = baseline_from_args(client, args, default_ref="HEAD")
    if baseline is None:
        return 0
    violations = client.check_id_immutability(baseline)
    for violation in violations:
        print(violation.describe())
    print(f"violations={len(violations)}")
    return 1 if violations else 0


def run_migrate_ids_command(client: CatalogClient, args: argparse.Namespace) -> int:
    """Run the legacy id migration and print where the mapping went."""
    mapping_path = Path(args.mapping).expanduser().resolve() if args.mapping else None
    result = client.migrate_ids(mapping_path)
    print(f"migrated={result.migrated_count}")
    print(f"mapping_path={result.mapping_path}")
    return 0
