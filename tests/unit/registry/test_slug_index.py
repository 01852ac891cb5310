"""Unit tests for the global slug index."""

from __future__ import annotations

import json

import pytest

from core.errors import CatalogSlugConflictError, CatalogStoreError
from core.types import SlugProposal
from registry.slug_index import (
    SlugIndex,
    check_proposed_slugs,
    read_slug_index,
    rebuild_slug_index,
    write_slug_index,
)
from tests.catalog_fixtures import build_catalog_repo, write_record


def test_rebuild_indexes_every_collection(tmp_path) -> None:
    """Index should map each slug to its collection."""
    config = build_catalog_repo(tmp_path)

    index = rebuild_slug_index(config.data_dir)

    assert (index.lookup("acme"), index.lookup("acme-synth"), index.lookup("acme-box")) == (
        "manufacturers",
        "software",
        "hardware",
    )


def test_rebuild_lists_every_cross_collection_conflict(tmp_path) -> None:
    """A slug used in two collections should fail with both locations."""
    config = build_catalog_repo(tmp_path)
    write_record(config.data_dir, "hardware", "acme-synth", {"name": "Clash", "manufacturer": "acme"})

    with pytest.raises(CatalogSlugConflictError) as error_info:
        rebuild_slug_index(config.data_dir)

    assert error_info.value.conflicts == {
        "acme-synth": ["software/acme-synth.yaml", "hardware/acme-synth.yaml"],
    }


def test_rebuild_treats_yaml_and_yml_as_one_slug(tmp_path) -> None:
    """Two extensions of one slug in a collection should conflict."""
    config = build_catalog_repo(tmp_path)
    (config.data_dir / "manufacturers" / "acme.yml").write_text("name: Other Acme\n", encoding="utf-8")

    with pytest.raises(CatalogSlugConflictError):
        rebuild_slug_index(config.data_dir)


def test_write_then_read_keeps_sorted_entries(tmp_path) -> None:
    """Persisted index should be sorted JSON readable back into an index."""
    index = SlugIndex(entries={"zeta": "software", "alpha": "manufacturers"})
    index_path = tmp_path / ".slug-index.json"
    write_slug_index(index, index_path)

    payload = json.loads(index_path.read_text(encoding="utf-8"))

    assert list(payload) == ["alpha", "zeta"] and read_slug_index(index_path) == index


def test_read_slug_index_rejects_bad_payload(tmp_path) -> None:
    """A non-mapping index file should raise a store error."""
    index_path = tmp_path / ".slug-index.json"
    index_path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(CatalogStoreError):
        read_slug_index(index_path)


def test_check_proposed_slugs_reports_each_conflict_kind() -> None:
    """Proposals should conflict with the index, each other and pending claims."""
    index = SlugIndex(entries={"serum": "software"})
    proposals = [
        SlugProposal("serum", "software"),
        SlugProposal("vital", "software"),
        SlugProposal("vital", "software"),
        SlugProposal("diva", "software"),
        SlugProposal("Bad Slug", "software"),
        SlugProposal("pigments", "software"),
    ]
    pending = [SlugProposal("diva", "software", source="#42")]

    conflicts = check_proposed_slugs(index, proposals, pending)

    assert [conflict.slug for conflict in conflicts] == ["serum", "vital", "diva", "Bad Slug"]


def test_check_proposed_slugs_names_pending_source() -> None:
    """A pending-claim conflict should name the pending proposal."""
    conflicts = check_proposed_slugs(
        SlugIndex(entries={}),
        [SlugProposal("diva", "software")],
        [SlugProposal("diva", "software", source="#42")],
    )

    assert "#42" in conflicts[0].reason
