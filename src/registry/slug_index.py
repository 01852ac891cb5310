"""Global slug index.

This module derives the ``slug -> collection`` mapping from record files,
persists it as sorted JSON, and answers availability queries for new
records and pending proposals.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping

from core.constants import COLLECTIONS
from core.errors import CatalogSlugConflictError, CatalogStoreError
from core.logging_config import get_logger
from core.types import Collection, RecordFile, SlugConflict, SlugProposal
from ingest.record_files import discover_record_files
from transforms.slugs import is_valid_slug_format

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class SlugIndex:
    """Immutable slug to collection mapping."""

    entries: Mapping[str, str]

    def lookup(self, slug: str) -> str | None:
        """Return the collection owning a slug, or None."""
        return self.entries.get(slug)

    def is_available(self, slug: str) -> bool:
        return slug not in self.entries

    def slugs_in(self, collection: Collection) -> tuple[str, ...]:
        """Return sorted slugs owned by one collection."""
        return tuple(sorted(slug for slug, owner in self.entries.items() if owner == collection))

    def __len__(self) -> int:
        return len(self.entries)


def rebuild_slug_index(data_root: Path) -> SlugIndex:
    """Scan every collection and build the slug index.

    Args:
        data_root: Data directory.

    Returns:
        Index with one entry per record file.

    Raises:
        CatalogSlugConflictError: If any slug appears in more than one
            storage location. Every conflict is listed.
    """
    locations = collect_slug_locations(data_root)
    conflicts = {
        slug: [record_file.relative_name for record_file in files]
        for slug, files in locations.items()
        if len(files) > 1
    }
    if conflicts:
        rows = "; ".join(f"{slug}: {', '.join(paths)}" for slug, paths in conflicts.items())
        raise CatalogSlugConflictError(
            f"Duplicate slugs found for {len(conflicts)} slug(s): {rows}. "
            "Rename or remove the duplicate record files.",
            conflicts=conflicts,
        )
    index = index_from_locations(locations)
    _LOGGER.info("slug_index_rebuilt", data_root=str(data_root), slug_count=len(index))
    return index


def collect_slug_locations(data_root: Path) -> dict[str, list[RecordFile]]:
    """Group record files by slug, sorted by slug.

    Args:
        data_root: Data directory.

    Returns:
        Mapping of slug to every record file claiming it, in discovery order.
    """
    locations: dict[str, list[RecordFile]] = {}
    for record_file in discover_record_files(data_root):
        locations.setdefault(record_file.slug, []).append(record_file)
    return {slug: locations[slug] for slug in sorted(locations)}


def index_from_locations(locations: Mapping[str, list[RecordFile]]) -> SlugIndex:
    """Build an index owning each slug by its first discovered location."""
    return SlugIndex(entries={slug: files[0].collection for slug, files in locations.items()})


def write_slug_index(index: SlugIndex, index_path: Path) -> None:
    """Write the index as JSON with alphabetically sorted keys."""
    payload = {slug: index.entries[slug] for slug in sorted(index.entries)}
    index_path.parent.mkdir(parents=True, exist_ok=True)
    index_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def read_slug_index(index_path: Path) -> SlugIndex:
    """Read a persisted slug index.

    Raises:
        CatalogStoreError: If the file is missing or malformed.
    """
    if not index_path.exists():
        raise CatalogStoreError(
            f"Slug index not found at {index_path}. Run 'catalog rebuild-slug-index' first."
        )
    try:
        payload = json.loads(index_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as error:
        raise CatalogStoreError(
            f"Failed to parse slug index at {index_path}: {error.msg}. "
            "Run 'catalog rebuild-slug-index' to regenerate it."
        ) from error
    if not isinstance(payload, dict) or not all(
        isinstance(slug, str) and owner in COLLECTIONS for slug, owner in payload.items()
    ):
        raise CatalogStoreError(
            f"Slug index at {index_path} must map slugs to collection names. "
            "Run 'catalog rebuild-slug-index' to regenerate it."
        )
    return SlugIndex(entries=dict(payload))


def check_proposed_slugs(
    index: SlugIndex,
    proposals: Iterable[SlugProposal],
    pending: Iterable[SlugProposal] = (),
) -> list[SlugConflict]:
    """Check new slugs against the index, each other, and pending proposals.

    This is a best-effort pre-merge check. Serialized merges remain the
    final guard against two proposals claiming one slug.

    Args:
        index: Current slug index.
        proposals: Slugs requested by the new contribution.
        pending: Slugs declared by outstanding, unmerged proposals.

    Returns:
        One conflict per rejected proposal slug, in input order.
    """
    pending_sources = {proposal.slug: proposal.source for proposal in pending}
    seen: set[str] = set()
    conflicts: list[SlugConflict] = []
    for proposal in proposals:
        reason = _conflict_reason(index, proposal, seen, pending_sources)
        seen.add(proposal.slug)
        if reason is not None:
            conflicts.append(SlugConflict(slug=proposal.slug, reason=reason))
    return conflicts


def _conflict_reason(
    index: SlugIndex,
    proposal: SlugProposal,
    seen: set[str],
    pending_sources: Mapping[str, str],
) -> str | None:
    slug = proposal.slug
    if not is_valid_slug_format(slug):
        return (
            f"Slug '{slug}' is not a valid slug. Use lowercase letters, numbers, "
            "and inner hyphens only."
        )
    owner = index.lookup(slug)
    if owner is not None:
        return f"Slug '{slug}' conflicts with existing {owner}/{slug}."
    if slug in seen:
        return f"Slug '{slug}' is proposed more than once in the same contribution."
    if slug in pending_sources:
        return f"Slug '{slug}' is already claimed by pending proposal {pending_sources[slug]}."
    return None
