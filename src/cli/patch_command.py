"""Patch generation and application command wiring for catalog CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any

from core.types import PatchRequest
from store.catalog_sdk import CatalogClient


def add_patch_command(subparsers: Any) -> None:
    """Register patch subcommand."""
    parser = subparsers.add_parser(
        "patch",
        help="Generate an incremental SQL patch between two dataset versions",
    )
    parser.add_argument("--from", dest="from_version", type=int, required=True, help="Baseline version")
    parser.add_argument("--to", dest="to_version", type=int, help="Target version; defaults to --from + 1")
    parser.add_argument("--output-dir", help="Patch directory; defaults to dist/patches")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--baseline-ref", help="Git ref of the baseline; defaults to v<from>")
    group.add_argument("--baseline-dir", help="Snapshot directory used instead of git")


def add_apply_patch_command(subparsers: Any) -> None:
    """Register apply-patch subcommand."""
    parser = subparsers.add_parser("apply-patch", help="Apply a patch file to a catalog database")
    parser.add_argument("patch", help="Patch file path")
    parser.add_argument("--database", help="Database file; defaults to dist/catalog.sqlite")


def run_patch_command(client: CatalogClient, args: argparse.Namespace) -> int:
    """Generate the patch and print its location and counts."""
    to_version = args.to_version if args.to_version is not None else args.from_version + 1
    request = PatchRequest(
        from_version=args.from_version,
        to_version=to_version,
        output_dir=_resolve(args.output_dir) or client.config.patches_dir,
        baseline_ref=args.baseline_ref,
        baseline_dir=_resolve(args.baseline_dir),
    )
    result = client.generate_patch(request)
    print(f"patch_path={result.patch_path or '-'}")
    print(f"changes={len(result.changes)}")
    print(f"skipped={len(result.skipped)}")
    print(f"statements={result.statement_count}")
    return 0


def run_apply_patch_command(client: CatalogClient, args: argparse.Namespace) -> int:
    """Apply the patch and print the resulting dataset version."""
    version = client.apply_patch(Path(args.patch).expanduser().resolve(), _resolve(args.database))
    print(f"catalog_version={version}")
    return 0


def _resolve(raw_path: str | None) -> Path | None:
    if not raw_path:
        return None
    return Path(raw_path).expanduser().resolve()
