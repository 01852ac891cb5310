"""Runtime configuration model for the catalog.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DATA_DIR_NAME,
    DATABASE_FILE_NAME,
    DEFAULT_DOCS_BASE_URL,
    DEFAULT_REPO_ROOT,
    ID_MIGRATION_MAP_FILE_NAME,
    OUTPUT_DIR_NAME,
    PATCHES_DIR_NAME,
    SCHEMA_DIR_NAME,
    SLUG_INDEX_FILE_NAME,
    VALIDATION_REPORT_FILE_NAME,
)
from core.errors import CatalogConfigError


@dataclass(frozen=True)
class CatalogConfig:
    """Validated runtime configuration.

    Attributes:
        repo_root: Repository root holding data, schema, and index files.
        data_dir: Directory with one sub-directory per record collection.
        schema_dir: Directory with controlled vocabulary files.
        output_dir: Directory receiving the database and patch files.
        docs_base_url: Base URL for validation error documentation links.
    """

    repo_root: Path
    data_dir: Path
    schema_dir: Path
    output_dir: Path
    docs_base_url: str

    @classmethod
    def from_env(cls) -> "CatalogConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            CatalogConfigError: If environment values are invalid.
        """
        repo_root_value = os.getenv("CATALOG_REPO_ROOT", str(DEFAULT_REPO_ROOT))
        repo_root = Path(repo_root_value).expanduser().resolve()
        return cls.for_repo_root(
            repo_root,
            data_dir=_optional_path(os.getenv("CATALOG_DATA_DIR"), repo_root),
            schema_dir=_optional_path(os.getenv("CATALOG_SCHEMA_DIR"), repo_root),
            output_dir=_optional_path(os.getenv("CATALOG_OUTPUT_DIR"), repo_root),
            docs_base_url=_parse_docs_base_url(os.getenv("CATALOG_DOCS_BASE_URL")),
        )

    @classmethod
    def for_repo_root(
        cls,
        repo_root: Path,
        data_dir: Path | None = None,
        schema_dir: Path | None = None,
        output_dir: Path | None = None,
        docs_base_url: str = DEFAULT_DOCS_BASE_URL,
    ) -> "CatalogConfig":
        """Build config with default sub-directories under a repository root.

        Args:
            repo_root: Repository root path.
            data_dir: Optional record directory override.
            schema_dir: Optional vocabulary directory override.
            output_dir: Optional output directory override.
            docs_base_url: Documentation base URL.

        Returns:
            A config object with resolved paths.
        """
        root = repo_root.expanduser().resolve()
        return cls(
            repo_root=root,
            data_dir=data_dir or root / DATA_DIR_NAME,
            schema_dir=schema_dir or root / SCHEMA_DIR_NAME,
            output_dir=output_dir or root / OUTPUT_DIR_NAME,
            docs_base_url=docs_base_url,
        )

    @property
    def slug_index_path(self) -> Path:
        """Path of the persisted slug index file."""
        return self.repo_root / SLUG_INDEX_FILE_NAME

    @property
    def database_path(self) -> Path:
        """Default path of the built SQLite database."""
        return self.output_dir / DATABASE_FILE_NAME

    @property
    def patches_dir(self) -> Path:
        """Directory receiving generated patch files."""
        return self.output_dir / PATCHES_DIR_NAME

    @property
    def id_migration_map_path(self) -> Path:
        """Path of the legacy identifier migration artifact."""
        return self.repo_root / ID_MIGRATION_MAP_FILE_NAME

    @property
    def validation_report_path(self) -> Path:
        return self.output_dir / VALIDATION_REPORT_FILE_NAME


def _optional_path(raw_value: str | None, repo_root: Path) -> Path | None:
    """Resolve an optional path override relative to the repository root."""
    if not raw_value:
        return None
    path = Path(raw_value).expanduser()
    if not path.is_absolute():
        path = repo_root / path
    return path.resolve()


def _parse_docs_base_url(raw_value: str | None) -> str:
    """Parse the documentation base URL environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Documentation base URL.

    Raises:
        CatalogConfigError: If value is not an http(s) URL.
    """
    if raw_value is None:
        return DEFAULT_DOCS_BASE_URL
    if not raw_value.startswith(("http://", "https://")):
        raise CatalogConfigError(
            "Invalid CATALOG_DOCS_BASE_URL value: "
            f"expected http(s) URL, got '{raw_value}'. "
            "Set CATALOG_DOCS_BASE_URL to an absolute documentation URL."
        )
    return raw_value
