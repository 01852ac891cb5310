"""Shared typed models.

This module defines immutable data models used by ingest, registry,
identity, validation, and store layers to keep interfaces explicit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Mapping

from core.constants import DEFAULT_CATALOG_VERSION

Collection = Literal["manufacturers", "software", "hardware"]
ChangeType = Literal["added", "modified", "deleted"]


@dataclass(frozen=True)
class LocaleInfo:
    """One approved locale.

    Attributes:
        code: Locale code, e.g. ``de`` or ``pt-BR``.
        name: English display name.
        native_name: Name in the locale's own language.
    """

    code: str
    name: str
    native_name: str


@dataclass(frozen=True)
class RecordFile:
    """A record file discovered on disk.

    Attributes:
        collection: Owning collection.
        slug: Filename stem, the record's authoritative slug.
        path: Absolute file path.
    """

    collection: Collection
    slug: str
    path: Path

    @property
    def relative_name(self) -> str:
        """Return ``<collection>/<filename>`` for reports."""
        return f"{self.collection}/{self.path.name}"


@dataclass(frozen=True)
class CatalogRecord:
    """Parsed record content keyed by its storage location.

    Attributes:
        collection: Owning collection.
        slug: Authoritative slug from the filename.
        data: Parsed YAML mapping.
        source_path: File the record was read from, if any.
    """

    collection: Collection
    slug: str
    data: Mapping[str, object]
    source_path: Path | None = None

    @property
    def record_id(self) -> str | None:
        """Return the assigned identifier, if any."""
        value = self.data.get("id")
        if value is None:
            return None
        return str(value)

    @property
    def name(self) -> str:
        """Return the display name."""
        return str(self.data.get("name", ""))

    @property
    def manufacturer_slug(self) -> str | None:
        """Return the referenced manufacturer slug for products."""
        value = self.data.get("manufacturer")
        return value if isinstance(value, str) else None


@dataclass(frozen=True)
class RecordChange:
    """One changed record file between a baseline and the working tree.

    Attributes:
        change_type: Added, modified, or deleted.
        collection: Owning collection.
        slug: Record slug.
        relative_path: Path relative to the data directory.
    """

    change_type: ChangeType
    collection: Collection
    slug: str
    relative_path: str


@dataclass(frozen=True)
class BuildRequest:
    """Request payload for a full database rebuild.

    Attributes:
        database_path: Target SQLite file, replaced when present.
        catalog_version: Dataset version recorded in metadata.
        optimize: Whether to VACUUM and ANALYZE after loading.
    """

    database_path: Path
    catalog_version: int = DEFAULT_CATALOG_VERSION
    optimize: bool = True


@dataclass(frozen=True)
class BuildSummary:
    """Result of a full database rebuild.

    Attributes:
        database_path: Written SQLite file.
        catalog_version: Recorded dataset version.
        record_counts: Inserted top-level rows per collection.
        size_bytes: Final file size.
    """

    database_path: Path
    catalog_version: int
    record_counts: Mapping[str, int]
    size_bytes: int


@dataclass(frozen=True)
class PatchRequest:
    """Request payload for incremental patch generation.

    Attributes:
        from_version: Baseline dataset version.
        to_version: Target dataset version.
        output_dir: Directory receiving the patch file.
        baseline_ref: Optional git ref; defaults to ``v<from_version>``.
        baseline_dir: Optional snapshot directory used instead of git.
    """

    from_version: int
    to_version: int
    output_dir: Path
    baseline_ref: str | None = None
    baseline_dir: Path | None = None


@dataclass(frozen=True)
class PatchResult:
    """Result of patch generation.

    Attributes:
        patch_path: Written patch file, or None when nothing changed.
        changes: Changes included in the patch.
        skipped: Changes skipped because their file could not be read.
        statement_count: Number of SQL statements emitted.
    """

    patch_path: Path | None
    changes: tuple[RecordChange, ...]
    skipped: tuple[RecordChange, ...] = ()
    statement_count: int = 0


@dataclass(frozen=True)
class IdAssignment:
    """One identifier written into a record file."""

    collection: Collection
    slug: str
    record_id: str


@dataclass(frozen=True)
class IdAssignmentReport:
    """Summary of an identifier assignment pass.

    Attributes:
        assigned: Newly assigned identifiers.
        skipped_count: Records that already carried an identifier.
    """

    assigned: tuple[IdAssignment, ...]
    skipped_count: int


@dataclass(frozen=True)
class IdChange:
    """An immutability violation between baseline and working tree."""

    relative_path: str
    old_id: str
    new_id: str | None

    def describe(self) -> str:
        """Render the violation as one report line."""
        return (
            f"{self.relative_path}: ID was changed from '{self.old_id}' to "
            f"'{self.new_id}'. IDs are immutable once assigned."
        )


@dataclass(frozen=True)
class SlugProposal:
    """A slug claimed by a pending contribution.

    Attributes:
        slug: Proposed slug.
        collection: Target collection.
        source: Free-form proposal reference, e.g. a pull request number.
    """

    slug: str
    collection: Collection
    source: str = "proposal"


@dataclass(frozen=True)
class SlugConflict:
    """A rejected slug proposal with its reason."""

    slug: str
    reason: str


@dataclass(frozen=True)
class MigrationResult:
    """Result of the one-time legacy identifier migration.

    Attributes:
        mapping: Per-collection map of old identifier to new identifier.
        mapping_path: Written mapping artifact.
    """

    mapping: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    mapping_path: Path | None = None

    @property
    def migrated_count(self) -> int:
        """Count migrated identifiers across collections."""
        return sum(len(rows) for rows in self.mapping.values())
