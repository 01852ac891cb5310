"""Python SDK for catalog operations.

This module exposes the entry points used by the CLI and by external
automation: record validation, slug checks, identifier lifecycle, and
database materialization.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping

from core.config import CatalogConfig
from core.errors import CatalogValidationError
from core.types import (
    BuildRequest,
    BuildSummary,
    Collection,
    IdAssignmentReport,
    IdChange,
    MigrationResult,
    PatchRequest,
    PatchResult,
    SlugConflict,
    SlugProposal,
)
from identity.id_assignment import assign_missing_ids
from identity.id_immutability import check_id_immutability
from identity.id_migration import migrate_legacy_ids
from ingest.baseline import Baseline
from ingest.record_files import load_all_records
from registry.context import CatalogContext
from registry.schema_registry import SchemaRegistryCache
from registry.slug_index import SlugIndex, check_proposed_slugs, rebuild_slug_index, write_slug_index
from store.full_build import build_catalog_database
from store.patch_builder import apply_patch, baseline_for_request, generate_patch
from validation.dataset_validation import DatasetValidationReport, validate_dataset
from validation.record_validator import RecordValidationResult, validate_record


class CatalogClient:
    """Primary SDK entry point for catalog workflows."""

    def __init__(self, config: CatalogConfig | None = None) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
        """
        self._config = config or CatalogConfig.from_env()
        self._registry_cache = SchemaRegistryCache()
        self._context: CatalogContext | None = None

    @property
    def config(self) -> CatalogConfig:
        return self._config

    def context(self) -> CatalogContext:
        """Return the run context, loading it on first use.

        Raises:
            CatalogSchemaError: If vocabulary files are unusable.
            CatalogSlugConflictError: If any slug is claimed twice.
        """
        if self._context is None:
            self._context = CatalogContext.load(self._config, self._registry_cache)
        return self._context

    def reload(self) -> CatalogContext:
        """Drop cached vocabularies and the slug index, then load them again."""
        self._registry_cache.clear()
        self._context = CatalogContext.load(self._config, self._registry_cache)
        return self._context

    def validate_record(
        self,
        source: str | Mapping[str, object],
        collection: Collection,
        slug: str,
    ) -> RecordValidationResult:
        """Validate one record without touching the data directory.

        Args:
            source: Raw YAML text or parsed mapping.
            collection: Target collection.
            slug: Proposed slug.

        Returns:
            Result with every issue found.
        """
        return validate_record(source, collection, slug, self.context())

    def is_slug_available(self, slug: str) -> bool:
        return self.context().slug_index.is_available(slug)

    def check_proposed_slugs(
        self,
        proposals: Iterable[SlugProposal],
        pending: Iterable[SlugProposal] = (),
    ) -> list[SlugConflict]:
        """Check proposed slugs against the index and outstanding proposals."""
        return check_proposed_slugs(self.context().slug_index, proposals, pending)

    def rebuild_slug_index(self, write: bool = True) -> SlugIndex:
        """Rescan record files and optionally persist the slug index.

        Raises:
            CatalogSlugConflictError: If any slug is claimed twice.
        """
        index = rebuild_slug_index(self._config.data_dir)
        if write:
            write_slug_index(index, self._config.slug_index_path)
        self._context = None
        return index

    def validate_dataset(
        self,
        baseline: Baseline | None = None,
        require_ids: bool = False,
    ) -> DatasetValidationReport:
        """Validate every record file and apply dataset-wide rules."""
        return validate_dataset(
            self._config,
            baseline=baseline,
            require_ids=require_ids,
            registry_cache=self._registry_cache,
        )

    def assign_ids(self) -> IdAssignmentReport:
        return assign_missing_ids(self._config.data_dir)

    def check_id_immutability(self, baseline: Baseline) -> list[IdChange]:
        return check_id_immutability(self._config.data_dir, baseline)

    def migrate_ids(self, mapping_path: Path | None = None) -> MigrationResult:
        """Run the one-time legacy identifier migration.

        Raises:
            CatalogIdentifierError: If the migration already ran or nothing is legacy.
        """
        return migrate_legacy_ids(
            self._config.data_dir,
            mapping_path or self._config.id_migration_map_path,
        )

    def build(self, request: BuildRequest | None = None) -> BuildSummary:
        """Validate the dataset, then rebuild the catalog database.

        Args:
            request: Optional build request; defaults to the configured path.

        Returns:
            Build summary.

        Raises:
            CatalogValidationError: If the dataset has validation errors.
            CatalogStoreError: If materialization fails.
        """
        self._require_valid_dataset()
        build_request = request or BuildRequest(database_path=self._config.database_path)
        records = load_all_records(self._config.data_dir)
        registry = self._registry_cache.get(self._config.schema_dir)
        return build_catalog_database(build_request, records, registry)

    def generate_patch(self, request: PatchRequest, baseline: Baseline | None = None) -> PatchResult:
        """Validate the dataset, then write the incremental SQL patch.

        Raises:
            CatalogValidationError: If the dataset has validation errors.
            CatalogIngestError: If the baseline cannot be read.
            CatalogStoreError: If materialization fails.
        """
        active_baseline = baseline or baseline_for_request(request, self._config)
        self._require_valid_dataset(active_baseline)
        registry = self._registry_cache.get(self._config.schema_dir)
        return generate_patch(request, self._config, registry, active_baseline)

    def apply_patch(self, patch_path: Path, database_path: Path | None = None) -> int:
        return apply_patch(database_path or self._config.database_path, patch_path)

    def _require_valid_dataset(self, baseline: Baseline | None = None) -> None:
        report = self.validate_dataset(baseline=baseline, require_ids=True)
        if not report.valid:
            raise CatalogValidationError(
                f"Dataset validation failed with {report.error_count} errors. "
                "Run 'catalog validate' to see them and fix the records before materializing."
            )
