"""Controlled-vocabulary checks with nearest-value suggestions.

Invalid categories, platforms, and formats are reported with the single
closest valid value within the suggestion distance, plus a truncated
list of valid values where that helps.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from core.error_codes import AutoFix, ValidationErrorCode
from registry.schema_registry import SchemaRegistry
from transforms.fuzzy_match import find_closest_match, format_valid_options
from validation.issue_collector import IssueCollector, child_path


def check_vocabulary(
    data: Mapping[str, object],
    registry: SchemaRegistry,
    collector: IssueCollector,
) -> None:
    """Check categories, platforms, and formats of one record.

    Args:
        data: Parsed record mapping.
        registry: Loaded vocabularies.
        collector: Destination for issues.
    """
    for path, value in _string_entries(data, "categories"):
        _check_category(value, path, registry, collector)
    for field_name in ("primaryCategory", "secondaryCategory"):
        value = data.get(field_name)
        if isinstance(value, str):
            _check_category(value, field_name, registry, collector)
    for path, value in _string_entries(data, "platforms"):
        if not registry.is_valid_platform(value):
            collector.add(
                ValidationErrorCode.E105_INVALID_PLATFORM,
                _invalid_value_message("platform", value, registry.platforms),
                path,
                auto_fix=_replace_fix(value, registry.platforms, path),
            )
    for path, value in _string_entries(data, "formats"):
        if not registry.is_valid_format(value):
            collector.add(
                ValidationErrorCode.E106_INVALID_FORMAT,
                _invalid_value_message("format", value, registry.formats),
                path,
                auto_fix=_replace_fix(value, registry.formats, path),
            )


def suggestion_suffix(value: str, options: Iterable[str]) -> str:
    """Return `` Did you mean 'x'?`` or an empty string."""
    suggestion = find_closest_match(value, options)
    return f" Did you mean '{suggestion}'?" if suggestion else ""


def _check_category(
    value: str,
    path: str,
    registry: SchemaRegistry,
    collector: IssueCollector,
) -> None:
    if registry.is_valid_category(value):
        return
    message = f"Invalid category '{value}'."
    suggestion = find_closest_match(value, registry.categories)
    if suggestion:
        message += f" Did you mean '{suggestion}'?"
    else:
        message += f" Valid categories: {format_valid_options(registry.categories)}"
    collector.add(
        ValidationErrorCode.E104_INVALID_CATEGORY,
        message,
        path,
        auto_fix=_replace_fix(value, registry.categories, path),
    )


def _invalid_value_message(kind: str, value: str, options: Iterable[str]) -> str:
    option_list = tuple(options)
    return (
        f"Invalid {kind} '{value}'.{suggestion_suffix(value, option_list)}"
        f" Valid {kind}s: {format_valid_options(option_list)}"
    )


def _replace_fix(value: str, options: Iterable[str], path: str) -> AutoFix | None:
    suggestion = find_closest_match(value, options)
    if suggestion is None:
        return None
    return AutoFix("replace", f"Replace '{value}' with '{suggestion}'", value, suggestion, path)


def _string_entries(data: Mapping[str, object], field_name: str) -> list[tuple[str, str]]:
    values = data.get(field_name)
    if not isinstance(values, list):
        return []
    return [
        (child_path(field_name, index), value)
        for index, value in enumerate(values)
        if isinstance(value, str)
    ]
