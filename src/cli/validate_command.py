"""Validation command wiring for catalog CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any

from cli.baseline_args import add_baseline_arguments, baseline_from_args
from store.catalog_sdk import CatalogClient
from validation.report_output import render_validation_report, write_validation_report


def add_validate_command(subparsers: Any) -> None:
    """Register validate subcommand."""
    parser = subparsers.add_parser(
        "validate",
        help="Validate every record file and report all issues",
    )
    parser.add_argument(
        "--require-ids",
        action="store_true",
        help="Treat records without an id as errors",
    )
    parser.add_argument(
        "--json-report",
        nargs="?",
        const="",
        help="Also write a JSON report; defaults to dist/validation-report.json",
    )
    add_baseline_arguments(parser, help_suffix="for the id immutability check")


def run_validate_command(client: CatalogClient, args: argparse.Namespace) -> int:
    """Execute a dataset validation run and print the report."""
    baseline = baseline_from_args(client, args)
    report = client.validate_dataset(baseline=baseline, require_ids=args.require_ids)
    docs_base_url = client.config.docs_base_url
    print(render_validation_report(report, docs_base_url))
    if args.json_report is not None:
        report_path = (
            Path(args.json_report).expanduser().resolve()
            if args.json_report
            else client.config.validation_report_path
        )
        write_validation_report(report, report_path, docs_base_url)
        print(f"report_path={report_path}")
    return 0 if report.valid else 1
