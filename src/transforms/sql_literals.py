"""SQL literal quoting for emitted patch statements.

Patch files are plain SQL text, so every value is rendered as a literal.
"""

from __future__ import annotations


def escape_sql(value: object) -> str:
    """Render a Python value as a SQLite literal.

    Args:
        value: None, bool, int, float, or string-like value.

    Returns:
        ``NULL``, a numeric literal, or a single-quoted string with
        embedded quotes doubled.
    """
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        return repr(value)
    text = str(value)
    return "'" + text.replace("'", "''") + "'"
