"""Shared baseline selection arguments for CLI commands."""

from __future__ import annotations

import argparse
from pathlib import Path

from ingest.baseline import Baseline, DirectoryBaseline, GitBaseline
from store.catalog_sdk import CatalogClient


def add_baseline_arguments(parser: argparse.ArgumentParser, help_suffix: str) -> None:
    """Register mutually exclusive ``--baseline-ref`` and ``--baseline-dir``."""
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--baseline-ref", help=f"Git ref used as baseline {help_suffix}")
    group.add_argument("--baseline-dir", help=f"Snapshot directory used as baseline {help_suffix}")


def baseline_from_args(
    client: CatalogClient,
    args: argparse.Namespace,
    default_ref: str | None = None,
) -> Baseline | None:
    """Build the selected baseline, or None when none was requested."""
    if args.baseline_dir:
        return DirectoryBaseline(Path(args.baseline_dir).expanduser().resolve())
    ref = args.baseline_ref or default_ref
    if ref is None:
        return None
    config = client.config
    return GitBaseline(config.repo_root, ref, config.data_dir)
