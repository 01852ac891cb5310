"""Dataset-wide validation run.

This module validates every record file, then applies the rules that
need the whole dataset: global slug uniqueness (E201), identifier format
(E400), missing identifiers (E401), duplicate identifiers (E402), and
identifier immutability against an optional baseline (E403).
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, replace
from typing import Mapping

from core.config import CatalogConfig
from core.constants import COLLECTIONS
from core.error_codes import IssueSeverity, ValidationErrorCode, ValidationIssue
from core.errors import CatalogYamlSyntaxError
from core.logging_config import get_logger
from core.types import RecordFile
from identity.id_immutability import check_id_immutability
from identity.id_tokens import is_legacy_record_id, is_valid_record_id
from ingest.baseline import Baseline
from ingest.record_files import read_record_text
from registry.context import CatalogContext
from registry.schema_registry import SchemaRegistryCache
from registry.slug_index import collect_slug_locations, index_from_locations
from validation.issue_collector import IssueCollector
from validation.record_validator import (
    RecordValidationResult,
    syntax_error_result,
    validate_record,
)

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class FileValidationResult:
    """Validation outcome of one record file."""

    relative_path: str
    result: RecordValidationResult

    @property
    def issues(self) -> tuple[ValidationIssue, ...]:
        return self.result.issues


@dataclass(frozen=True)
class ValidationStats:
    """Summary counts of a validation run.

    Attributes:
        valid_counts: Records without errors per collection.
        total_counts: Records per collection.
        with_ids: Records carrying an identifier.
        without_ids: Records lacking an identifier.
        duplicate_ids: Identifiers used by more than one record.
        files_with_translations: Records holding a translations block.
        locales_used: Sorted locales appearing in translations.
    """

    valid_counts: Mapping[str, int]
    total_counts: Mapping[str, int]
    with_ids: int = 0
    without_ids: int = 0
    duplicate_ids: int = 0
    files_with_translations: int = 0
    locales_used: tuple[str, ...] = ()

    @property
    def total_records(self) -> int:
        return sum(self.total_counts.values())


@dataclass(frozen=True)
class DatasetValidationReport:
    """All findings of one validation run, reported together."""

    files: tuple[FileValidationResult, ...]
    stats: ValidationStats
    baseline_checked: bool = False

    @property
    def valid(self) -> bool:
        """Return whether the run found no error-severity issue anywhere."""
        return self.error_count == 0

    @property
    def error_count(self) -> int:
        return sum(len(file.result.errors) for file in self.files)

    @property
    def warning_count(self) -> int:
        return sum(len(file.result.warnings) for file in self.files)

    @property
    def files_with_issues(self) -> tuple[FileValidationResult, ...]:
        return tuple(file for file in self.files if file.issues)


@dataclass(frozen=True)
class _PendingIssue:
    code: ValidationErrorCode
    message: str
    path: str
    severity: IssueSeverity = "error"


def validate_dataset(
    config: CatalogConfig,
    baseline: Baseline | None = None,
    require_ids: bool = False,
    registry_cache: SchemaRegistryCache | None = None,
) -> DatasetValidationReport:
    """Validate every record file under the configured data directory.

    Args:
        config: Runtime configuration.
        baseline: Optional prior revision for the immutability check.
        require_ids: Whether a missing identifier is an error.
        registry_cache: Optional shared registry cache.

    Returns:
        Report with per-file issues and run statistics.

    Raises:
        CatalogSchemaError: If vocabulary files cannot be loaded.
    """
    cache = registry_cache or SchemaRegistryCache()
    locations = collect_slug_locations(config.data_dir)
    context = CatalogContext(
        registry=cache.get(config.schema_dir),
        slug_index=index_from_locations(locations),
        config=config,
        registry_cache=cache,
    )
    record_files = sorted(
        (record_file for files in locations.values() for record_file in files),
        key=lambda item: (COLLECTIONS.index(item.collection), item.path.name),
    )
    results = {
        record_file.relative_name: _validate_file(record_file, context)
        for record_file in record_files
    }
    pending: dict[str, list[_PendingIssue]] = {name: [] for name in results}
    _add_duplicate_slug_issues(locations, pending)
    duplicate_ids = _add_identifier_issues(results, require_ids, pending)
    if baseline is not None:
        for change in check_id_immutability(config.data_dir, baseline):
            if change.relative_path in pending:
                pending[change.relative_path].append(
                    _PendingIssue(ValidationErrorCode.E403_IDENTIFIER_CHANGED, change.describe(), "id")
                )
    files = tuple(
        FileValidationResult(name, _with_pending_issues(results[name], pending[name]))
        for name in results
    )
    report = DatasetValidationReport(
        files=files,
        stats=_build_stats(files, duplicate_ids),
        baseline_checked=baseline is not None,
    )
    _LOGGER.info(
        "dataset_validated",
        records=report.stats.total_records,
        errors=report.error_count,
        warnings=report.warning_count,
    )
    return report


def _validate_file(record_file: RecordFile, context: CatalogContext) -> RecordValidationResult:
    try:
        text = read_record_text(record_file)
    except CatalogYamlSyntaxError as error:
        return syntax_error_result(error, record_file.collection, record_file.slug)
    return validate_record(text, record_file.collection, record_file.slug, context)


def _add_duplicate_slug_issues(
    locations: Mapping[str, list[RecordFile]],
    pending: dict[str, list[_PendingIssue]],
) -> None:
    for slug, files in locations.items():
        if len(files) < 2:
            continue
        names = [record_file.relative_name for record_file in files]
        for name in names:
            others = ", ".join(other for other in names if other != name)
            pending[name].append(
                _PendingIssue(
                    ValidationErrorCode.E201_DUPLICATE_SLUG,
                    f"Slug '{slug}' is also used by {others}. "
                    "Slugs must be unique across all collections.",
                    "(root)",
                )
            )


def _add_identifier_issues(
    results: Mapping[str, RecordValidationResult],
    require_ids: bool,
    pending: dict[str, list[_PendingIssue]],
) -> int:
    owners: dict[str, list[str]] = {}
    for name, result in results.items():
        if result.record is None:
            continue
        raw_id = result.record.data.get("id")
        if raw_id is None:
            pending[name].append(
                _PendingIssue(
                    ValidationErrorCode.E401_MISSING_IDENTIFIER,
                    "Record has no id. Run 'catalog assign-ids' after merge.",
                    "(root)",
                    "error" if require_ids else "warning",
                )
            )
            continue
        if not is_valid_record_id(raw_id):
            hint = (
                "Replace legacy numeric ids with 'catalog migrate-ids'."
                if is_legacy_record_id(raw_id)
                else "Ids are 21-character tokens of letters, digits, '_' and '-'."
            )
            pending[name].append(
                _PendingIssue(
                    ValidationErrorCode.E400_INVALID_IDENTIFIER_FORMAT,
                    f"Invalid id {raw_id!r}. {hint}",
                    "id",
                )
            )
        owners.setdefault(str(raw_id), []).append(name)
    duplicate_count = 0
    for record_id, names in owners.items():
        if len(names) < 2:
            continue
        duplicate_count += 1
        for name in names:
            others = ", ".join(other for other in names if other != name)
            pending[name].append(
                _PendingIssue(
                    ValidationErrorCode.E402_DUPLICATE_IDENTIFIER,
                    f"Duplicate id '{record_id}' also used by {others}.",
                    "id",
                )
            )
    return duplicate_count


def _with_pending_issues(
    result: RecordValidationResult,
    pending: list[_PendingIssue],
) -> RecordValidationResult:
    if not pending:
        return result
    collector = IssueCollector(result.document)
    collector.extend(result.issues)
    for issue in pending:
        collector.add(issue.code, issue.message, issue.path, severity=issue.severity)
    return replace(result, issues=collector.issues)


def _build_stats(files: tuple[FileValidationResult, ...], duplicate_ids: int) -> ValidationStats:
    valid_counts: Counter[str] = Counter({collection: 0 for collection in COLLECTIONS})
    total_counts: Counter[str] = Counter({collection: 0 for collection in COLLECTIONS})
    with_ids = without_ids = files_with_translations = 0
    locales: set[str] = set()
    for file in files:
        result = file.result
        total_counts[result.collection] += 1
        if result.valid:
            valid_counts[result.collection] += 1
        if result.record is None:
            continue
        if result.record.data.get("id") is None:
            without_ids += 1
        else:
            with_ids += 1
        translations = result.record.data.get("translations")
        if isinstance(translations, Mapping) and translations:
            files_with_translations += 1
            locales.update(str(locale) for locale in translations)
    return ValidationStats(
        valid_counts=dict(valid_counts),
        total_counts=dict(total_counts),
        with_ids=with_ids,
        without_ids=without_ids,
        duplicate_ids=duplicate_ids,
        files_with_translations=files_with_translations,
        locales_used=tuple(sorted(locales)),
    )
