"""Validation report rendering for console and JSON consumers."""

from __future__ import annotations

import json
from pathlib import Path

from core.constants import COLLECTIONS, DEFAULT_DOCS_BASE_URL
from core.error_codes import issue_to_payload
from validation.dataset_validation import DatasetValidationReport

_RULE = "-" * 70


def render_validation_report(
    report: DatasetValidationReport,
    docs_base_url: str = DEFAULT_DOCS_BASE_URL,
) -> str:
    """Render every issue plus run statistics as stable multi-line text."""
    lines = ["Catalog Validation Results", _RULE]
    lines.append("status=passed" if report.valid else "status=failed")
    for file in report.files_with_issues:
        lines.append("")
        lines.append(file.relative_path)
        for issue in file.issues:
            location = f":{issue.line}" if issue.line is not None else ""
            severity = "" if issue.severity == "error" else f" [{issue.severity}]"
            lines.append(f"   {issue.code.value}{location}{severity}: {issue.message}")
            lines.append(f"         Path: {issue.path}")
            if issue.auto_fix is not None:
                lines.append(f"         Fix: {issue.auto_fix.description}")
            lines.append(f"         Docs: {issue.docs_url(docs_base_url)}")
    stats = report.stats
    lines.append(_RULE)
    lines.append("Stats:")
    for collection in COLLECTIONS:
        lines.append(
            f"   {collection}: {stats.valid_counts.get(collection, 0)}/"
            f"{stats.total_counts.get(collection, 0)} valid"
        )
    lines.append(f"   total: {stats.total_records}")
    lines.append(f"   entries_with_ids: {stats.with_ids}")
    lines.append(f"   entries_without_ids: {stats.without_ids}")
    if stats.without_ids:
        lines.append("   (run 'catalog assign-ids' to assign ids to new entries)")
    lines.append(f"   duplicate_ids: {stats.duplicate_ids}")
    lines.append(f"   files_with_translations: {stats.files_with_translations}")
    lines.append(f"   locales_used: {', '.join(stats.locales_used) or '(none)'}")
    lines.append(f"errors={report.error_count}")
    lines.append(f"warnings={report.warning_count}")
    return "\n".join(lines)


def report_to_payload(
    report: DatasetValidationReport,
    docs_base_url: str = DEFAULT_DOCS_BASE_URL,
) -> dict[str, object]:
    """Serialize a report into a JSON-safe payload for automation."""
    stats = report.stats
    return {
        "valid": report.valid,
        "error_count": report.error_count,
        "warning_count": report.warning_count,
        "baseline_checked": report.baseline_checked,
        "files": [
            {
                "file": file.relative_path,
                "collection": file.result.collection,
                "slug": file.result.slug,
                "issues": [issue_to_payload(issue, docs_base_url) for issue in file.issues],
            }
            for file in report.files_with_issues
        ],
        "stats": {
            "valid": dict(stats.valid_counts),
            "total": dict(stats.total_counts),
            "with_ids": stats.with_ids,
            "without_ids": stats.without_ids,
            "duplicate_ids": stats.duplicate_ids,
            "files_with_translations": stats.files_with_translations,
            "locales_used": list(stats.locales_used),
        },
    }


def write_validation_report(
    report: DatasetValidationReport,
    report_path: Path,
    docs_base_url: str = DEFAULT_DOCS_BASE_URL,
) -> Path:
    """Persist the JSON report and return its path."""
    report_path.parent.mkdir(parents=True, exist_ok=True)
    payload = report_to_payload(report, docs_base_url)
    report_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    return report_path
