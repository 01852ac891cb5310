"""Public SDK surface for the catalog.

This module provides a stable import path for automation callers.
It re-exports the primary client and typed request models.
"""

from __future__ import annotations

from core.config import CatalogConfig
from core.error_codes import AutoFix, ValidationErrorCode, ValidationIssue
from core.types import (
    BuildRequest,
    BuildSummary,
    IdAssignmentReport,
    IdChange,
    MigrationResult,
    PatchRequest,
    PatchResult,
    SlugConflict,
    SlugProposal,
)
from ingest.baseline import DirectoryBaseline, GitBaseline
from store.catalog_sdk import CatalogClient
from transforms.slugs import generate_slug

__all__ = [
    "AutoFix",
    "BuildRequest",
    "BuildSummary",
    "CatalogClient",
    "CatalogConfig",
    "DirectoryBaseline",
    "GitBaseline",
    "IdAssignmentReport",
    "IdChange",
    "MigrationResult",
    "PatchRequest",
    "PatchResult",
    "SlugConflict",
    "SlugProposal",
    "ValidationErrorCode",
    "ValidationIssue",
    "generate_slug",
]
