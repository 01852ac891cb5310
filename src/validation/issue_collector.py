"""Issue accumulation with source-position lookup."""

from __future__ import annotations

from core.error_codes import AutoFix, IssueSeverity, ValidationErrorCode, ValidationIssue
from ingest.yaml_documents import ParsedDocument, parse_error_path


class IssueCollector:
    """Collect every issue found in one record.

    Args:
        document: Parsed document used to locate field paths, if any.
    """

    def __init__(self, document: ParsedDocument | None = None) -> None:
        self._document = document
        self._issues: list[ValidationIssue] = []

    @property
    def issues(self) -> tuple[ValidationIssue, ...]:
        return tuple(self._issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self._issues if issue.severity == "error")

    def add(
        self,
        code: ValidationErrorCode,
        message: str,
        path: str,
        auto_fix: AutoFix | None = None,
        severity: IssueSeverity = "error",
    ) -> None:
        """Record one issue located at a dotted field path.

        Args:
            code: Taxonomy code.
            message: Human-readable message.
            path: Dotted field path, or ``(root)`` for the whole record.
            auto_fix: Optional fix suggestion.
            severity: Issue severity.
        """
        line = column = None
        if self._document is not None:
            position = self._document.position_for(parse_error_path(path))
            if position is not None:
                line, column = position.line, position.column
        self._issues.append(
            ValidationIssue(
                code=code,
                message=message,
                path=path or "(root)",
                line=line,
                column=column,
                auto_fix=auto_fix,
                severity=severity,
            )
        )

    def extend(self, issues: tuple[ValidationIssue, ...]) -> None:
        self._issues.extend(issues)


def child_path(parent: str, key: str | int) -> str:
    """Join a dotted path and a key or list index."""
    return f"{parent}.{key}" if parent else str(key)
