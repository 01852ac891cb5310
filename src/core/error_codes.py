"""Validation error code taxonomy.

Codes are grouped into four classes by their leading digit:
E1xx schema/format, E2xx reference, E3xx content, E4xx identifier.
Each code has a stable title and a documentation anchor.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal

from core.constants import DEFAULT_DOCS_BASE_URL

ErrorClass = Literal["schema", "reference", "content", "identifier"]
IssueSeverity = Literal["error", "warning"]
AutoFixType = Literal["replace", "add", "remove", "rename"]


class ValidationErrorCode(str, Enum):
    """Closed set of validation error codes."""

    E100_MISSING_REQUIRED_FIELD = "E100"
    E101_INVALID_FIELD_TYPE = "E101"
    E102_INVALID_SLUG_FORMAT = "E102"
    E103_INVALID_URL_FORMAT = "E103"
    E104_INVALID_CATEGORY = "E104"
    E105_INVALID_PLATFORM = "E105"
    E106_INVALID_FORMAT = "E106"
    E107_INVALID_LOCALE = "E107"
    E108_INVALID_DATE_FORMAT = "E108"
    E109_SLUG_FILENAME_MISMATCH = "E109"
    E110_YAML_SYNTAX_ERROR = "E110"
    E111_INVALID_FORMAT_IDENTIFIER = "E111"
    E199_VALIDATION_ERROR = "E199"

    E200_MANUFACTURER_NOT_FOUND = "E200"
    E201_DUPLICATE_SLUG = "E201"
    E202_DUPLICATE_CATEGORY = "E202"
    E203_PARENT_COMPANY_NOT_FOUND = "E203"
    E204_IO_TRANSLATION_MISMATCH = "E204"

    E300_INVALID_MARKDOWN = "E300"
    E301_YOUTUBE_URL_FORMAT = "E301"
    E302_UNCLOSED_CODE_BLOCK = "E302"
    E303_UNBALANCED_BACKTICKS = "E303"

    E400_INVALID_IDENTIFIER_FORMAT = "E400"
    E401_MISSING_IDENTIFIER = "E401"
    E402_DUPLICATE_IDENTIFIER = "E402"
    E403_IDENTIFIER_CHANGED = "E403"

    @property
    def error_class(self) -> ErrorClass:
        """Return the taxonomy class of this code."""
        return _CLASS_BY_PREFIX[self.value[1]]

    @property
    def title(self) -> str:
        """Return the short human-readable title."""
        return _ERROR_TITLES[self]

    @property
    def anchor(self) -> str:
        """Return the documentation anchor, e.g. ``e104-invalid-category``."""
        slugged_title = "-".join(
            "".join(char for char in word if char.isalnum()) for word in self.title.lower().split()
        )
        return f"{self.value.lower()}-{slugged_title}"


_CLASS_BY_PREFIX: dict[str, ErrorClass] = {
    "1": "schema",
    "2": "reference",
    "3": "content",
    "4": "identifier",
}

_ERROR_TITLES: dict[ValidationErrorCode, str] = {
    ValidationErrorCode.E100_MISSING_REQUIRED_FIELD: "Missing required field",
    ValidationErrorCode.E101_INVALID_FIELD_TYPE: "Invalid field type",
    ValidationErrorCode.E102_INVALID_SLUG_FORMAT: "Invalid slug format",
    ValidationErrorCode.E103_INVALID_URL_FORMAT: "Invalid URL format",
    ValidationErrorCode.E104_INVALID_CATEGORY: "Invalid category",
    ValidationErrorCode.E105_INVALID_PLATFORM: "Invalid platform",
    ValidationErrorCode.E106_INVALID_FORMAT: "Invalid format",
    ValidationErrorCode.E107_INVALID_LOCALE: "Invalid locale",
    ValidationErrorCode.E108_INVALID_DATE_FORMAT: "Invalid date format",
    ValidationErrorCode.E109_SLUG_FILENAME_MISMATCH: "Slug does not match filename",
    ValidationErrorCode.E110_YAML_SYNTAX_ERROR: "YAML syntax error",
    ValidationErrorCode.E111_INVALID_FORMAT_IDENTIFIER: "Invalid format identifier",
    ValidationErrorCode.E199_VALIDATION_ERROR: "Validation error",
    ValidationErrorCode.E200_MANUFACTURER_NOT_FOUND: "Manufacturer not found",
    ValidationErrorCode.E201_DUPLICATE_SLUG: "Duplicate slug",
    ValidationErrorCode.E202_DUPLICATE_CATEGORY: "Duplicate category",
    ValidationErrorCode.E203_PARENT_COMPANY_NOT_FOUND: "Parent company not found",
    ValidationErrorCode.E204_IO_TRANSLATION_MISMATCH: "IO translation mismatch",
    ValidationErrorCode.E300_INVALID_MARKDOWN: "Invalid markdown",
    ValidationErrorCode.E301_YOUTUBE_URL_FORMAT: "Invalid YouTube URL format",
    ValidationErrorCode.E302_UNCLOSED_CODE_BLOCK: "Unclosed code block",
    ValidationErrorCode.E303_UNBALANCED_BACKTICKS: "Unbalanced backticks",
    ValidationErrorCode.E400_INVALID_IDENTIFIER_FORMAT: "Invalid identifier format",
    ValidationErrorCode.E401_MISSING_IDENTIFIER: "Missing identifier",
    ValidationErrorCode.E402_DUPLICATE_IDENTIFIER: "Duplicate identifier",
    ValidationErrorCode.E403_IDENTIFIER_CHANGED: "Identifier changed",
}


@dataclass(frozen=True)
class AutoFix:
    """Best-effort fix suggestion attached to an issue.

    Attributes:
        fix_type: Kind of edit to apply.
        description: Human-readable fix description.
        old_value: Value to replace or remove.
        new_value: Value to insert.
        path: Dotted field path the fix applies to.
    """

    fix_type: AutoFixType
    description: str
    old_value: str | None = None
    new_value: str | None = None
    path: str | None = None


@dataclass(frozen=True)
class ValidationIssue:
    """One validation finding with source location.

    Attributes:
        code: Taxonomy code.
        message: Human-readable message.
        path: Dotted field path, ``(root)`` or ``(yaml)``.
        line: One-based source line when recoverable.
        column: One-based source column when recoverable.
        auto_fix: Optional fix suggestion.
        severity: ``error`` blocks the run; ``warning`` is reported only.
    """

    code: ValidationErrorCode
    message: str
    path: str
    line: int | None = None
    column: int | None = None
    auto_fix: AutoFix | None = None
    severity: IssueSeverity = "error"

    def docs_url(self, base_url: str = DEFAULT_DOCS_BASE_URL) -> str:
        """Return the documentation link for this issue's code."""
        return build_docs_url(self.code, base_url)


def build_docs_url(code: ValidationErrorCode, base_url: str = DEFAULT_DOCS_BASE_URL) -> str:
    """Build the documentation URL for an error code."""
    return f"{base_url}#{code.anchor}"


def issue_to_payload(issue: ValidationIssue, base_url: str = DEFAULT_DOCS_BASE_URL) -> dict[str, object]:
    """Serialize an issue into a JSON-safe payload."""
    payload: dict[str, object] = {
        "code": issue.code.value,
        "class": issue.code.error_class,
        "severity": issue.severity,
        "message": issue.message,
        "path": issue.path,
        "line": issue.line,
        "column": issue.column,
        "docs_url": issue.docs_url(base_url),
    }
    if issue.auto_fix is not None:
        payload["auto_fix"] = {
            "type": issue.auto_fix.fix_type,
            "description": issue.auto_fix.description,
            "old_value": issue.auto_fix.old_value,
            "new_value": issue.auto_fix.new_value,
            "path": issue.auto_fix.path,
        }
    return payload
