"""Lightweight markup balance checks for description-like fields."""

from __future__ import annotations

from core.error_codes import ValidationErrorCode
from validation.issue_collector import IssueCollector

_FENCE = "```"


def find_markup_problems(content: str) -> list[tuple[ValidationErrorCode, str]]:
    """Find unbalanced code fences and inline code spans.

    Fences must pair up across the whole text. Outside fenced regions,
    every line must hold an even number of backticks.

    Args:
        content: Markup text.

    Returns:
        ``(code, message)`` pairs in text order.
    """
    problems: list[tuple[ValidationErrorCode, str]] = []
    if content.count(_FENCE) % 2 != 0:
        problems.append(
            (
                ValidationErrorCode.E302_UNCLOSED_CODE_BLOCK,
                "Invalid markdown: unclosed code block (``` without closing ```).",
            )
        )
    in_code_block = False
    for line_number, line in enumerate(content.split("\n"), 1):
        if line.strip().startswith(_FENCE):
            in_code_block = not in_code_block
            continue
        if in_code_block:
            continue
        if line.count("`") % 2 != 0:
            problems.append(
                (
                    ValidationErrorCode.E303_UNBALANCED_BACKTICKS,
                    f"Invalid markdown: unclosed inline code on line {line_number}.",
                )
            )
    return problems


def check_markup(content: str, path: str, collector: IssueCollector) -> None:
    """Report markup problems of one field."""
    for code, message in find_markup_problems(content):
        collector.add(code, message, path)
