"""Cross-record reference and duplicate-category checks."""

from __future__ import annotations

from typing import Mapping

from core.constants import MANUFACTURER_LIST_DISPLAY_LIMIT
from core.error_codes import AutoFix, ValidationErrorCode
from registry.schema_registry import SchemaRegistry
from transforms.fuzzy_match import find_closest_match
from validation.issue_collector import IssueCollector, child_path


def check_manufacturer_reference(
    data: Mapping[str, object],
    manufacturer_slugs: tuple[str, ...],
    collector: IssueCollector,
) -> None:
    """Report a product whose manufacturer slug is not a known manufacturer."""
    manufacturer = data.get("manufacturer")
    if not isinstance(manufacturer, str) or not manufacturer or manufacturer in manufacturer_slugs:
        return
    suggestion = find_closest_match(manufacturer, manufacturer_slugs)
    message = f"Referenced manufacturer '{manufacturer}' does not exist."
    if suggestion:
        message += f" Did you mean '{suggestion}'?"
    if len(manufacturer_slugs) <= MANUFACTURER_LIST_DISPLAY_LIMIT:
        message += f" Available: {', '.join(manufacturer_slugs) or '(none)'}"
    collector.add(
        ValidationErrorCode.E200_MANUFACTURER_NOT_FOUND,
        message,
        "manufacturer",
        auto_fix=AutoFix(
            "replace",
            f"Replace '{manufacturer}' with '{suggestion}'",
            manufacturer,
            suggestion,
            "manufacturer",
        )
        if suggestion
        else None,
    )


def check_parent_company(
    data: Mapping[str, object],
    slug: str,
    manufacturer_slugs: tuple[str, ...],
    collector: IssueCollector,
) -> None:
    """Report a manufacturer whose parent company is unknown or itself."""
    parent_company = data.get("parentCompany")
    if not isinstance(parent_company, str) or not parent_company:
        return
    if parent_company == slug:
        collector.add(
            ValidationErrorCode.E203_PARENT_COMPANY_NOT_FOUND,
            f"Manufacturer '{slug}' cannot be its own parent company.",
            "parentCompany",
        )
        return
    if parent_company in manufacturer_slugs:
        return
    suggestion = find_closest_match(parent_company, manufacturer_slugs)
    message = f"Parent company '{parent_company}' does not exist."
    if suggestion:
        message += f" Did you mean '{suggestion}'?"
    collector.add(ValidationErrorCode.E203_PARENT_COMPANY_NOT_FOUND, message, "parentCompany")


def check_duplicate_categories(
    data: Mapping[str, object],
    registry: SchemaRegistry,
    collector: IssueCollector,
) -> None:
    """Report categories repeated by primary/secondary or within the list.

    Values are compared after alias normalization.
    """
    categories = data.get("categories")
    if not isinstance(categories, list):
        return
    normalized = [
        registry.normalize_category(value) if isinstance(value, str) else None
        for value in categories
    ]
    for field_name in ("primaryCategory", "secondaryCategory"):
        value = data.get(field_name)
        if not isinstance(value, str):
            continue
        canonical = registry.normalize_category(value)
        if canonical in normalized:
            duplicate = categories[normalized.index(canonical)]
            collector.add(
                ValidationErrorCode.E202_DUPLICATE_CATEGORY,
                f"{field_name} '{value}' should not be duplicated in categories array.",
                "categories",
                auto_fix=AutoFix(
                    "remove",
                    f"Remove '{duplicate}' from categories",
                    str(duplicate),
                    None,
                    child_path("categories", normalized.index(canonical)),
                ),
            )
    seen: set[str] = set()
    for index, canonical in enumerate(normalized):
        if canonical is None:
            continue
        if canonical in seen:
            path = child_path("categories", index)
            collector.add(
                ValidationErrorCode.E202_DUPLICATE_CATEGORY,
                f"Duplicate category '{categories[index]}' in array.",
                path,
                auto_fix=AutoFix(
                    "remove", "Remove the duplicate entry", str(categories[index]), None, path
                ),
            )
        seen.add(canonical)
