"""Unit tests for structured logging configuration."""

from __future__ import annotations

import json

import pytest

from core.errors import CatalogConfigError
from core.logging_config import configure_logging, get_logger


def test_events_are_json_lines_on_stderr(capsys) -> None:
    """Log events should render as JSON on stderr, not stdout."""
    get_logger(__name__).info("probe_event", records=3)

    captured = capsys.readouterr()

    payload = json.loads(captured.err.strip().splitlines()[-1])
    observed = (captured.out, payload["event"], payload["records"], payload["level"])
    assert observed == ("", "probe_event", 3, "info")


def test_level_filters_lower_events(capsys) -> None:
    """Events below the configured level should be dropped."""
    configure_logging("warning")
    try:
        get_logger(__name__).info("quiet_event")
        captured = capsys.readouterr()
    finally:
        configure_logging()

    assert "quiet_event" not in captured.err


def test_unknown_level_is_rejected() -> None:
    """Unknown level names should fail with the accepted values."""
    with pytest.raises(CatalogConfigError, match="debug, info, warning, error"):
        configure_logging("verbose")
