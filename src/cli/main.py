"""Catalog CLI entry points.
This module exposes validation, identity and materialization commands.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Sequence, cast

from cli.identity_command import (
    add_assign_ids_command,
    add_check_ids_command,
    add_migrate_ids_command,
    run_assign_ids_command,
    run_check_ids_command,
    run_migrate_ids_command,
)
from cli.patch_command import (
    add_apply_patch_command,
    add_patch_command,
    run_apply_patch_command,
    run_patch_command,
)
from cli.validate_command import add_validate_command, run_validate_command
from core.config import CatalogConfig
from core.constants import COLLECTIONS, DEFAULT_CATALOG_VERSION
from core.errors import CatalogError, CatalogSlugConflictError
from core.logging_config import LOG_LEVELS, configure_logging
from core.types import BuildRequest, Collection, SlugProposal
from store.catalog_sdk import CatalogClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="catalog", description="Catalog data tooling CLI")
    parser.add_argument("--repo-root", help="Override CATALOG_REPO_ROOT for this command")
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        help="Minimum level of JSON log lines written to stderr",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    add_validate_command(subparsers)
    _add_rebuild_slug_index_command(subparsers)
    _add_check_slugs_command(subparsers)
    add_assign_ids_command(subparsers)
    add_check_ids_command(subparsers)
    add_migrate_ids_command(subparsers)
    _add_build_command(subparsers)
    add_patch_command(subparsers)
    add_apply_patch_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the catalog CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        if args.log_level:
            configure_logging(args.log_level)
        client = _build_client(args.repo_root)
        return _dispatch(parser, client, args)
    except CatalogSlugConflictError as error:
        for slug, locations in sorted(error.conflicts.items()):
            print(f"slug_conflict={slug}\t{', '.join(locations)}")
        print(f"error={error}")
        return 1
    except CatalogError as error:
        print(f"error={error}")
        return 1


def _dispatch(parser: argparse.ArgumentParser, client: CatalogClient, args: argparse.Namespace) -> int:
    if args.command == "validate":
        return run_validate_command(client, args)
    if args.command == "rebuild-slug-index":
        return _run_rebuild_slug_index_command(client, args)
    if args.command == "check-slugs":
        return _run_check_slugs_command(client, args)
    if args.command == "assign-ids":
        return run_assign_ids_command(client, args)
    if args.command == "check-ids":
        return run_check_ids_command(client, args)
    if args.command == "migrate-ids":
        return run_migrate_ids_command(client, args)
    if args.command == "build":
        return _run_build_command(client, args)
    if args.command == "patch":
        return run_patch_command(client, args)
    if args.command == "apply-patch":
        return run_apply_patch_command(client, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(repo_root: str | None) -> CatalogClient:
    """Build SDK client with optional repository root override.

    Args:
        repo_root: Optional override path.

    Returns:
        Configured SDK client.
    """
    if repo_root:
        config = CatalogConfig.for_repo_root(Path(repo_root))
    else:
        config = CatalogConfig.from_env()
    return CatalogClient(config)


def _run_rebuild_slug_index_command(client: CatalogClient, args: argparse.Namespace) -> int:
    """Handle rebuild-slug-index command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    index = client.rebuild_slug_index(write=not args.dry_run)
    print(f"slug_index_path={'-' if args.dry_run else client.config.slug_index_path}")
    for collection in COLLECTIONS:
        print(f"{collection}={len(index.slugs_in(collection))}")
    print(f"slugs={len(index)}")
    return 0


def _run_check_slugs_command(client: CatalogClient, args: argparse.Namespace) -> int:
    """Handle check-slugs command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code; 1 when any slug is rejected.
    """
    collection = cast(Collection, args.collection)
    proposals = [SlugProposal(slug=slug, collection=collection) for slug in args.slugs]
    pending = [
        SlugProposal(slug=slug, collection=collection, source="pending") for slug in args.pending
    ]
    conflicts = {
        conflict.slug: conflict.reason
        for conflict in client.check_proposed_slugs(proposals, pending)
    }
    for slug in dict.fromkeys(args.slugs):
        if slug in conflicts:
            print(f"slug={slug}\tconflict={conflicts[slug]}")
        else:
            print(f"slug={slug}\tstatus=available")
    return 1 if conflicts else 0


def _run_build_command(client: CatalogClient, args: argparse.Namespace) -> int:
    """Handle build command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    database_path = Path(args.output).expanduser().resolve() if args.output else client.config.database_path
    summary = client.build(
        BuildRequest(
            database_path=database_path,
            catalog_version=args.catalog_version,
            optimize=not args.no_optimize,
        )
    )
    print(f"database_path={summary.database_path}")
    print(f"catalog_version={summary.catalog_version}")
    for collection, count in summary.record_counts.items():
        print(f"{collection}={count}")
    print(f"size_bytes={summary.size_bytes}")
    return 0


def _add_rebuild_slug_index_command(subparsers: Any) -> None:
    """Register rebuild-slug-index subcommand."""
    parser = subparsers.add_parser(
        "rebuild-slug-index",
        help="Rescan record files and rewrite the slug index",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Check for conflicts without writing the index file",
    )


def _add_check_slugs_command(subparsers: Any) -> None:
    """Register check-slugs subcommand."""
    parser = subparsers.add_parser("check-slugs", help="Check proposed slugs for conflicts")
    parser.add_argument("slugs", nargs="+", help="Proposed slugs")
    parser.add_argument(
        "--collection",
        choices=COLLECTIONS,
        required=True,
        help="Collection the slugs are proposed for",
    )
    parser.add_argument(
        "--pending",
        nargs="*",
        default=[],
        help="Slugs claimed by other outstanding proposals",
    )


def _add_build_command(subparsers: Any) -> None:
    """Register build subcommand."""
    parser = subparsers.add_parser("build", help="Validate and rebuild the SQLite catalog")
    parser.add_argument("--output", help="Database file path; defaults to dist/catalog.sqlite")
    parser.add_argument(
        "--catalog-version",
        type=int,
        default=DEFAULT_CATALOG_VERSION,
        help="Dataset version recorded in catalog metadata",
    )
    parser.add_argument(
        "--no-optimize",
        action="store_true",
        help="Skip VACUUM and ANALYZE after loading",
    )
