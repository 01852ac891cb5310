"""Schema registry for controlled vocabularies.

This module loads categories, category aliases, formats, platforms, and
locales from the schema directory. Any malformed file or alias pointing
at an unknown category is fatal, since no record can be validated
without a trustworthy vocabulary.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence

from core.constants import (
    CATEGORIES_FILE_NAME,
    CATEGORY_ALIASES_FILE_NAME,
    FORMATS_FILE_NAME,
    LOCALES_FILE_NAME,
    PLATFORMS_FILE_NAME,
)
from core.errors import CatalogIngestError, CatalogSchemaError
from core.logging_config import get_logger
from core.types import LocaleInfo
from ingest.yaml_documents import load_yaml_file

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class SchemaRegistry:
    """Loaded controlled vocabularies.

    Attributes:
        categories: Canonical category values.
        category_aliases: Alias to canonical category mapping.
        formats: Valid plugin format values.
        platforms: Valid platform values.
        locales: Approved locales.
    """

    categories: tuple[str, ...]
    category_aliases: Mapping[str, str]
    formats: tuple[str, ...]
    platforms: tuple[str, ...]
    locales: tuple[LocaleInfo, ...]

    @classmethod
    def load(cls, schema_root: Path) -> "SchemaRegistry":
        """Load every vocabulary file from a schema directory.

        Args:
            schema_root: Directory holding the vocabulary YAML files.

        Returns:
            Loaded registry.

        Raises:
            CatalogSchemaError: If a file is missing, malformed, or an
                alias resolves to no canonical category.
        """
        categories = _load_string_list(schema_root / CATEGORIES_FILE_NAME, "categories")
        aliases = _load_aliases(schema_root / CATEGORY_ALIASES_FILE_NAME)
        _check_alias_targets(aliases, categories)
        registry = cls(
            categories=categories,
            category_aliases=aliases,
            formats=_load_string_list(schema_root / FORMATS_FILE_NAME, "formats"),
            platforms=_load_string_list(schema_root / PLATFORMS_FILE_NAME, "platforms"),
            locales=_load_locales(schema_root / LOCALES_FILE_NAME),
        )
        _LOGGER.info(
            "schema_registry_loaded",
            schema_root=str(schema_root),
            categories=len(registry.categories),
            aliases=len(registry.category_aliases),
            formats=len(registry.formats),
            platforms=len(registry.platforms),
            locales=len(registry.locales),
        )
        return registry

    @property
    def locale_codes(self) -> tuple[str, ...]:
        """Approved locale codes."""
        return tuple(locale.code for locale in self.locales)

    def normalize_category(self, value: str) -> str:
        """Return the canonical category for a value, or the value unchanged."""
        if value in self.categories:
            return value
        return self.category_aliases.get(value, value)

    def is_valid_category(self, value: str) -> bool:
        """Return whether a value is canonical or a known alias."""
        return value in self.categories or value in self.category_aliases

    def is_valid_format(self, value: str) -> bool:
        return value in self.formats

    def is_valid_platform(self, value: str) -> bool:
        return value in self.platforms

    def is_valid_locale(self, value: str) -> bool:
        return value in self.locale_codes

    def all_category_inputs(self) -> frozenset[str]:
        """Return every accepted category spelling, canonical or alias."""
        return frozenset(self.categories) | frozenset(self.category_aliases)


class SchemaRegistryCache:
    """Per-run registry cache keyed by schema directory.

    A long-lived process or test clears it after vocabulary files change.
    """

    def __init__(self) -> None:
        self._registries: dict[Path, SchemaRegistry] = {}

    def get(self, schema_root: Path) -> SchemaRegistry:
        """Return the cached registry for a directory, loading it on first use."""
        key = schema_root.expanduser().resolve()
        registry = self._registries.get(key)
        if registry is None:
            registry = SchemaRegistry.load(key)
            self._registries[key] = registry
        return registry

    def clear(self) -> None:
        """Drop every cached registry."""
        self._registries.clear()


def _load_mapping(file_path: Path) -> Mapping[str, object]:
    if not file_path.exists():
        raise CatalogSchemaError(
            f"Schema file not found at {file_path}. Restore it from version control."
        )
    try:
        payload = load_yaml_file(file_path)
    except CatalogIngestError as error:
        raise CatalogSchemaError(str(error)) from error
    if not isinstance(payload, Mapping):
        raise CatalogSchemaError(
            f"Schema file {file_path.name} must contain a YAML mapping at top level."
        )
    return payload


def _load_string_list(file_path: Path, key: str) -> tuple[str, ...]:
    payload = _load_mapping(file_path)
    values = payload.get(key)
    if not isinstance(values, Sequence) or isinstance(values, (str, bytes)):
        raise CatalogSchemaError(
            f"Schema file {file_path.name} must define '{key}' as a list of strings."
        )
    parsed_values: list[str] = []
    for value in values:
        if not isinstance(value, str) or not value:
            raise CatalogSchemaError(
                f"Schema file {file_path.name} has a non-string entry in '{key}': {value!r}."
            )
        parsed_values.append(value)
    return tuple(parsed_values)


def _load_aliases(file_path: Path) -> dict[str, str]:
    payload = _load_mapping(file_path)
    raw_aliases = payload.get("aliases")
    if raw_aliases is None:
        return {}
    if not isinstance(raw_aliases, Mapping):
        raise CatalogSchemaError(
            f"Schema file {file_path.name} must define 'aliases' as a mapping of alias to category."
        )
    aliases: dict[str, str] = {}
    for alias, canonical in raw_aliases.items():
        if not isinstance(alias, str) or not isinstance(canonical, str):
            raise CatalogSchemaError(
                f"Schema file {file_path.name} has a non-string alias entry: {alias!r}: {canonical!r}."
            )
        aliases[alias] = canonical
    return aliases


def _check_alias_targets(aliases: Mapping[str, str], categories: tuple[str, ...]) -> None:
    canonical_set = set(categories)
    dangling = sorted(alias for alias, target in aliases.items() if target not in canonical_set)
    if dangling:
        rows = ", ".join(f"{alias} -> {aliases[alias]}" for alias in dangling)
        raise CatalogSchemaError(
            f"Category aliases point at unknown categories: {rows}. "
            f"Add the targets to {CATEGORIES_FILE_NAME} or fix {CATEGORY_ALIASES_FILE_NAME}."
        )


def _load_locales(file_path: Path) -> tuple[LocaleInfo, ...]:
    payload = _load_mapping(file_path)
    raw_locales = payload.get("locales")
    if not isinstance(raw_locales, Sequence) or isinstance(raw_locales, (str, bytes)):
        raise CatalogSchemaError(
            f"Schema file {file_path.name} must define 'locales' as a list of mappings."
        )
    locales: list[LocaleInfo] = []
    for index, entry in enumerate(raw_locales):
        if not isinstance(entry, Mapping) or not isinstance(entry.get("code"), str):
            raise CatalogSchemaError(
                f"Schema file {file_path.name} locale #{index + 1} must be a mapping with a 'code'."
            )
        code = str(entry["code"])
        locales.append(
            LocaleInfo(
                code=code,
                name=str(entry.get("name", code)),
                native_name=str(entry.get("nativeName", entry.get("name", code))),
            )
        )
    return tuple(locales)
