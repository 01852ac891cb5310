"""Baselines for change detection.

A baseline is a prior revision of the record files. It lists which record
files were added, modified, or deleted since that revision and returns
the prior text of any record file. Git refs and plain snapshot
directories are both supported.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Protocol

from core.constants import COLLECTIONS
from core.errors import CatalogIngestError
from core.logging_config import get_logger
from core.types import ChangeType, RecordChange
from ingest.record_files import discover_record_files, record_file_from_relative_path
from ingest.yaml_documents import decode_yaml_bytes, read_yaml_text

_LOGGER = get_logger(__name__)

_GIT_STATUS_TO_CHANGE: dict[str, ChangeType] = {
    "A": "added",
    "M": "modified",
    "D": "deleted",
}


class Baseline(Protocol):
    """Prior revision of the record files."""

    def changes(self, data_root: Path) -> tuple[RecordChange, ...]:
        """List record changes from the baseline to the working tree."""

    def read_text(self, relative_path: str) -> str | None:
        """Return baseline text of ``<collection>/<file>``, or None when absent."""


class GitBaseline:
    """Baseline stored as a git ref of the repository.

    Args:
        repo_root: Git work tree root.
        ref: Commit, branch, or tag naming the baseline.
        data_root: Data directory inside the work tree.
    """

    def __init__(self, repo_root: Path, ref: str, data_root: Path) -> None:
        self._repo_root = repo_root
        self._ref = ref
        self._data_prefix = _relative_posix(data_root, repo_root)

    @property
    def ref(self) -> str:
        return self._ref

    def changes(self, data_root: Path) -> tuple[RecordChange, ...]:
        output = self._run_git(
            ["diff", "--name-status", "--no-renames", self._ref, "--", self._data_prefix]
        )
        changes: list[RecordChange] = []
        for line in output.splitlines():
            status, _, file_path = line.partition("\t")
            change_type = _GIT_STATUS_TO_CHANGE.get(status.strip()[:1])
            if change_type is None or not file_path:
                continue
            change = self._change_for_path(data_root, change_type, file_path)
            if change is not None:
                changes.append(change)
        # Untracked record files count as added.
        untracked = self._run_git(
            ["ls-files", "--others", "--full-name", "--", self._data_prefix]
        )
        for file_path in untracked.splitlines():
            change = self._change_for_path(data_root, "added", file_path)
            if change is not None:
                changes.append(change)
        return _sorted_changes(changes)

    def read_text(self, relative_path: str) -> str | None:
        object_name = f"{self._ref}:{self._data_prefix}/{relative_path}"
        try:
            completed = subprocess.run(
                ["git", "show", object_name],
                cwd=self._repo_root,
                capture_output=True,
                check=True,
            )
        except subprocess.CalledProcessError:
            return None
        except OSError as error:
            raise CatalogIngestError(
                f"Failed to run git in {self._repo_root}: {error}. Install git and retry."
            ) from error
        return decode_yaml_bytes(completed.stdout, object_name)

    def _change_for_path(
        self, data_root: Path, change_type: ChangeType, file_path: str
    ) -> RecordChange | None:
        relative_path = _strip_prefix(file_path, self._data_prefix)
        return _record_change(data_root, change_type, relative_path)

    def _run_git(self, args: list[str]) -> str:
        try:
            completed = subprocess.run(
                ["git", *args],
                cwd=self._repo_root,
                capture_output=True,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as error:
            raise CatalogIngestError(
                f"git {' '.join(args)} failed: {error.stderr.strip()}. "
                f"Check that '{self._ref}' exists in {self._repo_root}."
            ) from error
        except OSError as error:
            raise CatalogIngestError(
                f"Failed to run git in {self._repo_root}: {error}. Install git and retry."
            ) from error
        return completed.stdout


class DirectoryBaseline:
    """Baseline stored as a snapshot copy of the data directory.

    Args:
        snapshot_root: Directory laid out like the data directory.
    """

    def __init__(self, snapshot_root: Path) -> None:
        if not snapshot_root.is_dir():
            raise CatalogIngestError(
                f"Baseline directory not found at {snapshot_root}. "
                "Provide a snapshot of the data directory."
            )
        self._snapshot_root = snapshot_root

    def changes(self, data_root: Path) -> tuple[RecordChange, ...]:
        baseline_files = {
            record_file.relative_name: record_file
            for record_file in discover_record_files(self._snapshot_root)
        }
        current_files = {
            record_file.relative_name: record_file for record_file in discover_record_files(data_root)
        }
        changes: list[RecordChange] = []
        for relative_path, record_file in current_files.items():
            baseline_file = baseline_files.get(relative_path)
            if baseline_file is None:
                change_type: ChangeType = "added"
            elif baseline_file.path.read_bytes() != record_file.path.read_bytes():
                change_type = "modified"
            else:
                continue
            changes.append(
                RecordChange(change_type, record_file.collection, record_file.slug, relative_path)
            )
        for relative_path, record_file in baseline_files.items():
            if relative_path not in current_files:
                changes.append(
                    RecordChange("deleted", record_file.collection, record_file.slug, relative_path)
                )
        return _sorted_changes(changes)

    def read_text(self, relative_path: str) -> str | None:
        file_path = self._snapshot_root / relative_path
        if not file_path.is_file():
            return None
        return read_yaml_text(file_path, f"baseline file {relative_path}")


def _record_change(data_root: Path, change_type: ChangeType, relative_path: str) -> RecordChange | None:
    record_file = record_file_from_relative_path(data_root, relative_path)
    if record_file is None:
        _LOGGER.debug("baseline_path_ignored", relative_path=relative_path)
        return None
    return RecordChange(
        change_type=change_type,
        collection=record_file.collection,
        slug=record_file.slug,
        relative_path=relative_path,
    )


def _sorted_changes(changes: list[RecordChange]) -> tuple[RecordChange, ...]:
    """Order changes manufacturers first, then software, then hardware."""
    return tuple(
        sorted(
            changes,
            key=lambda change: (COLLECTIONS.index(change.collection), change.relative_path),
        )
    )


def _relative_posix(path: Path, root: Path) -> str:
    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except ValueError as error:
        raise CatalogIngestError(
            f"Data directory {path} is outside the repository root {root}. "
            "Point CATALOG_DATA_DIR inside the repository."
        ) from error


def _strip_prefix(file_path: str, prefix: str) -> str:
    if prefix in ("", "."):
        return file_path
    return file_path[len(prefix) + 1 :] if file_path.startswith(prefix + "/") else file_path
