"""Per-record validation entry point.

``validate_record`` is pure: it reads nothing from disk and accepts raw
YAML text or an already-parsed mapping. A YAML syntax failure yields a
single E110 issue and stops checks for that record only. Reference
checks run only when structural checks found no errors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from core.constants import COLLECTIONS, HARDWARE, MANUFACTURERS
from core.error_codes import ValidationErrorCode, ValidationIssue
from core.errors import CatalogValidationError, CatalogYamlSyntaxError
from core.types import CatalogRecord, Collection
from ingest.yaml_documents import ParsedDocument, parse_yaml_text
from registry.context import CatalogContext
from validation.field_checks import check_record_structure
from validation.format_identifier_checks import check_format_identifiers
from validation.issue_collector import IssueCollector
from validation.reference_checks import (
    check_duplicate_categories,
    check_manufacturer_reference,
    check_parent_company,
)
from validation.translation_checks import check_io_translations, check_translations
from validation.vocabulary_checks import check_vocabulary


@dataclass(frozen=True)
class RecordValidationResult:
    """Validation outcome of one record.

    Attributes:
        collection: Owning collection.
        slug: Record slug.
        issues: Every issue found, in check order.
        record: Parsed record, or None when the text was unusable.
        document: Parsed document used for positions, when parsed from text.
    """

    collection: Collection
    slug: str
    issues: tuple[ValidationIssue, ...]
    record: CatalogRecord | None = None
    document: ParsedDocument | None = field(default=None, compare=False, repr=False)

    @property
    def valid(self) -> bool:
        """Return whether no error-severity issue was found."""
        return not self.errors

    @property
    def errors(self) -> tuple[ValidationIssue, ...]:
        return tuple(issue for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> tuple[ValidationIssue, ...]:
        return tuple(issue for issue in self.issues if issue.severity == "warning")


def validate_record(
    source: str | Mapping[str, object],
    collection: Collection,
    slug: str,
    context: CatalogContext,
) -> RecordValidationResult:
    """Validate one record against every per-record rule.

    Args:
        source: Raw YAML text, or an already-parsed mapping.
        collection: Target collection.
        slug: Authoritative slug (the filename stem).
        context: Registry and slug index for this run.

    Returns:
        Result with every issue found.

    Raises:
        CatalogValidationError: If the collection is unknown.
    """
    if collection not in COLLECTIONS:
        raise CatalogValidationError(
            f"Unknown collection '{collection}'. Use one of: {', '.join(COLLECTIONS)}."
        )
    document: ParsedDocument | None = None
    if isinstance(source, str):
        try:
            document = parse_yaml_text(source)
        except CatalogYamlSyntaxError as error:
            return syntax_error_result(error, collection, slug)
        payload: object = document.payload
    else:
        payload = source
    collector = IssueCollector(document)
    if not isinstance(payload, Mapping) or not all(isinstance(key, str) for key in payload):
        collector.add(
            ValidationErrorCode.E101_INVALID_FIELD_TYPE,
            "Record must be a YAML mapping with string keys.",
            "(root)",
        )
        return RecordValidationResult(collection, slug, collector.issues, document=document)
    data: Mapping[str, object] = payload
    _run_record_checks(data, collection, slug, context, collector)
    record = CatalogRecord(collection=collection, slug=slug, data=dict(data))
    return RecordValidationResult(collection, slug, collector.issues, record, document)


def syntax_error_result(
    error: CatalogYamlSyntaxError,
    collection: Collection,
    slug: str,
) -> RecordValidationResult:
    """Build the single-issue E110 result for text that cannot be parsed."""
    issue = ValidationIssue(
        code=ValidationErrorCode.E110_YAML_SYNTAX_ERROR,
        message=str(error),
        path="(yaml)",
        line=error.line,
        column=error.column,
    )
    return RecordValidationResult(collection=collection, slug=slug, issues=(issue,))


def _run_record_checks(
    data: Mapping[str, object],
    collection: Collection,
    slug: str,
    context: CatalogContext,
    collector: IssueCollector,
) -> None:
    registry = context.registry
    check_record_structure(data, collection, slug, collector)
    check_format_identifiers(data, collector)
    check_translations(data, collection, registry, collector)
    if collection != MANUFACTURERS:
        check_vocabulary(data, registry, collector)
    structural_errors = collector.error_count
    if structural_errors == 0:
        manufacturer_slugs = context.manufacturer_slugs()
        if collection == MANUFACTURERS:
            check_parent_company(data, slug, manufacturer_slugs, collector)
        else:
            check_manufacturer_reference(data, manufacturer_slugs, collector)
        if collection == HARDWARE:
            check_io_translations(data, collector)
    if collection != MANUFACTURERS:
        check_duplicate_categories(data, registry, collector)
