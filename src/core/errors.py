"""Catalog exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
Per-record validation findings are reported as data, not raised.
"""

from __future__ import annotations


class CatalogError(Exception):
    """Base exception for all catalog failures."""


class CatalogConfigError(CatalogError):
    """Raised for invalid runtime configuration."""


class CatalogSchemaError(CatalogError):
    """Raised when controlled vocabulary files are missing or malformed."""


class CatalogIngestError(CatalogError):
    """Raised for record discovery, parsing, and baseline failures."""


class CatalogYamlSyntaxError(CatalogIngestError):
    """Raised when record text is not well-formed YAML.

    Attributes:
        line: One-based line of the syntax problem, when known.
        column: One-based column of the syntax problem, when known.
    """

    def __init__(self, message: str, line: int | None = None, column: int | None = None) -> None:
        super().__init__(message)
        self.line = line
        self.column = column


class CatalogValidationError(CatalogError):
    """Raised when a validation run fails as a whole."""


class CatalogIdentifierError(CatalogError):
    """Raised for identifier assignment, migration, and immutability failures."""


class CatalogSlugConflictError(CatalogError):
    """Raised when one slug is claimed by more than one record file.

    Attributes:
        conflicts: Mapping of slug to every storage location claiming it.
    """

    def __init__(self, message: str, conflicts: dict[str, list[str]]) -> None:
        super().__init__(message)
        self.conflicts = conflicts


class CatalogStoreError(CatalogError):
    """Raised for relational store build and patch failures."""


class CatalogDependencyError(CatalogError):
    """Raised when an optional runtime dependency is missing."""
