"""Translation block checks.

Translations are keyed by approved locale. Each collection allows a
fixed set of translatable fields, and hardware IO translations must name
an existing IO port through ``originalName``.
"""

from __future__ import annotations

from typing import Mapping

from core.constants import HARDWARE, MANUFACTURERS, SOFTWARE
from core.error_codes import AutoFix, ValidationErrorCode
from registry.schema_registry import SchemaRegistry
from transforms.fuzzy_match import find_closest_match, format_valid_options
from validation.issue_collector import IssueCollector, child_path

TRANSLATABLE_FIELDS: dict[str, tuple[str, ...]] = {
    MANUFACTURERS: ("description", "website"),
    SOFTWARE: ("description", "details", "specs", "website", "links"),
    HARDWARE: ("description", "details", "specs", "website", "links", "io"),
}


def check_translations(
    data: Mapping[str, object],
    collection: str,
    registry: SchemaRegistry,
    collector: IssueCollector,
) -> None:
    """Check translation locales and translated field names.

    Args:
        data: Parsed record mapping.
        collection: Owning collection.
        registry: Loaded vocabularies.
        collector: Destination for issues.
    """
    translations = data.get("translations")
    if translations is None:
        return
    if not isinstance(translations, Mapping):
        collector.add(
            ValidationErrorCode.E101_INVALID_FIELD_TYPE,
            "Field 'translations' must be a mapping of locale to translated fields.",
            "translations",
        )
        return
    allowed_fields = TRANSLATABLE_FIELDS[collection]
    for locale, translated in translations.items():
        locale_path = child_path("translations", str(locale))
        if not registry.is_valid_locale(str(locale)):
            collector.add(
                ValidationErrorCode.E107_INVALID_LOCALE,
                f"Locale '{locale}' is not approved. Add it to schema/locales.yaml first. "
                f"Approved: {format_valid_options(registry.locale_codes)}",
                locale_path,
                auto_fix=_locale_fix(str(locale), registry, locale_path),
            )
            continue
        if not isinstance(translated, Mapping):
            collector.add(
                ValidationErrorCode.E101_INVALID_FIELD_TYPE,
                f"Translation '{locale}' must be a mapping of translated fields.",
                locale_path,
            )
            continue
        for field_name in translated:
            if field_name not in allowed_fields:
                collector.add(
                    ValidationErrorCode.E101_INVALID_FIELD_TYPE,
                    f"Invalid translated field '{field_name}'. "
                    f"Valid fields: {', '.join(allowed_fields)}",
                    child_path(locale_path, str(field_name)),
                )


def check_io_translations(data: Mapping[str, object], collector: IssueCollector) -> None:
    """Check that hardware IO translations name existing IO ports."""
    translations = data.get("translations")
    if not isinstance(translations, Mapping):
        return
    io_entries = data.get("io")
    io_names = [
        str(entry["name"])
        for entry in (io_entries if isinstance(io_entries, list) else [])
        if isinstance(entry, Mapping) and isinstance(entry.get("name"), str)
    ]
    for locale, translated in translations.items():
        if not isinstance(translated, Mapping) or not isinstance(translated.get("io"), list):
            continue
        io_path = child_path(child_path("translations", str(locale)), "io")
        for index, io_translation in enumerate(translated["io"]):
            entry_path = child_path(io_path, index)
            original_name = (
                io_translation.get("originalName") if isinstance(io_translation, Mapping) else None
            )
            if not isinstance(original_name, str) or not original_name:
                collector.add(
                    ValidationErrorCode.E100_MISSING_REQUIRED_FIELD,
                    "IO translation is missing 'originalName'.",
                    entry_path,
                )
                continue
            if original_name not in io_names:
                collector.add(
                    ValidationErrorCode.E204_IO_TRANSLATION_MISMATCH,
                    f"No I/O port found with name '{original_name}'. "
                    f"Available: {', '.join(io_names) or '(none)'}",
                    child_path(entry_path, "originalName"),
                )


def _locale_fix(locale: str, registry: SchemaRegistry, path: str) -> AutoFix | None:
    suggestion = find_closest_match(locale, registry.locale_codes)
    if suggestion is None:
        return None
    return AutoFix("rename", f"Rename locale '{locale}' to '{suggestion}'", locale, suggestion, path)
