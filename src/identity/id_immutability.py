"""Identifier immutability checks against a baseline revision."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

from core.errors import CatalogIdentifierError, CatalogYamlSyntaxError
from core.logging_config import get_logger
from core.types import IdChange
from ingest.baseline import Baseline
from ingest.yaml_documents import parse_yaml_text, read_yaml_text

_LOGGER = get_logger(__name__)


def check_id_immutability(data_root: Path, baseline: Baseline) -> list[IdChange]:
    """Find modified records whose assigned identifier changed.

    Args:
        data_root: Data directory of the working tree.
        baseline: Prior revision to compare against.

    Returns:
        One violation per modified record whose baseline carried an
        identifier that is now different or gone.
    """
    violations: list[IdChange] = []
    checked = 0
    for change in baseline.changes(data_root):
        if change.change_type != "modified":
            continue
        current_path = data_root / change.relative_path
        try:
            baseline_text = baseline.read_text(change.relative_path)
            if baseline_text is None or not current_path.is_file():
                continue
            current_text = read_yaml_text(current_path, f"record file {change.relative_path}")
        except CatalogYamlSyntaxError as error:
            _LOGGER.warning(
                "id_check_unreadable_record",
                relative_path=change.relative_path,
                reason=str(error),
            )
            continue
        old_id = _read_id(baseline_text, change.relative_path)
        if old_id is None:
            continue
        checked += 1
        new_id = _read_id(current_text, change.relative_path)
        if new_id != old_id:
            violations.append(
                IdChange(
                    relative_path=change.relative_path,
                    old_id=str(old_id),
                    new_id=None if new_id is None else str(new_id),
                )
            )
    _LOGGER.info("id_immutability_checked", checked=checked, violations=len(violations))
    return violations


def enforce_id_immutability(data_root: Path, baseline: Baseline) -> None:
    """Raise when any assigned identifier changed.

    Raises:
        CatalogIdentifierError: Naming every offending record with its
            old and new value.
    """
    violations = check_id_immutability(data_root, baseline)
    if violations:
        rows = "\n".join(f"  {violation.describe()}" for violation in violations)
        raise CatalogIdentifierError(
            f"ID immutability check failed for {len(violations)} record(s):\n{rows}\n"
            "Restore the original ids; ids never change once assigned."
        )


def _read_id(text: str, relative_path: str) -> object | None:
    try:
        payload = parse_yaml_text(text).payload
    except CatalogYamlSyntaxError:
        _LOGGER.warning("id_check_unparseable_record", relative_path=relative_path)
        return None
    if not isinstance(payload, Mapping):
        return None
    return payload.get("id")
