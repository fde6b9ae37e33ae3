"""
repo-catalog — unit tests for observability logging

File: tests/unit/observability/test_logging.py

Purpose
- Validate text and JSON-lines log output, level selection and handler replacement.
"""

from __future__ import annotations

import io
import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from repo_catalog.observability.logging import setup_logging, shutdown_logging

if TYPE_CHECKING:
    from collections.abc import Iterator

_LOGGER = "repo_catalog.tests"


@pytest.fixture(autouse=True)
def _cleanup_logging() -> Iterator[None]:
    yield
    shutdown_logging(_LOGGER)


def test_text_format_respects_configured_level() -> None:
    stream = io.StringIO()
    logger = setup_logging({"log_level": "INFO"}, stream=stream, logger_name=_LOGGER)

    logger.debug("hidden")
    logger.info("registered %s", "alpha")

    assert stream.getvalue() == "INFO: registered alpha\n"


def test_verbose_lowers_threshold_to_debug() -> None:
    stream = io.StringIO()
    logger = setup_logging(
        {"log_level": "ERROR"}, verbose=True, stream=stream, logger_name=_LOGGER
    )

    logger.debug("hello")

    assert "DEBUG: hello" in stream.getvalue()


def test_json_format_emits_one_object_per_line_with_extras() -> None:
    stream = io.StringIO()
    logger = setup_logging(
        {"log_level": "DEBUG", "log_format": "json"}, stream=stream, logger_name=_LOGGER
    )
    when = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)

    logger.warning(
        "pruned",
        extra={"groups": ("a", "b"), "path": Path("/work/alpha"), "when": when},
    )

    lines = stream.getvalue().splitlines()
    assert len(lines) == 1
    event = json.loads(lines[0])
    assert event["level"] == "WARNING"
    assert event["logger"] == _LOGGER
    assert event["message"] == "pruned"
    assert event["timestamp"].endswith("Z")
    assert event["fields"] == {
        "groups": ["a", "b"],
        "path": "/work/alpha",
        "when": "2026-03-01T09:00:00.000000Z",
    }


def test_json_format_includes_exception_text() -> None:
    stream = io.StringIO()
    logger = setup_logging({"log_format": "json"}, stream=stream, logger_name=_LOGGER)

    try:
        raise RuntimeError("broken snapshot")
    except RuntimeError:
        logger.exception("save failed")

    event = json.loads(stream.getvalue())
    assert "RuntimeError: broken snapshot" in event["exception"]


def test_setup_twice_keeps_a_single_handler() -> None:
    first = io.StringIO()
    second = io.StringIO()
    setup_logging(stream=first, logger_name=_LOGGER)
    logger = setup_logging(stream=second, logger_name=_LOGGER)

    logger.warning("once")

    assert first.getvalue() == ""
    assert second.getvalue() == "WARNING: once\n"
    assert len(logger.handlers) == 1
    assert logger.propagate is False


def test_shutdown_detaches_only_installed_handler() -> None:
    logger = logging.getLogger(_LOGGER)
    foreign = logging.NullHandler()
    logger.addHandler(foreign)
    try:
        setup_logging(stream=io.StringIO(), logger_name=_LOGGER)
        shutdown_logging(_LOGGER)

        assert logger.handlers == [foreign]
    finally:
        logger.removeHandler(foreign)


def test_unknown_level_is_rejected() -> None:
    with pytest.raises(ValueError, match="unsupported logging level"):
        setup_logging({"log_level": "LOUD"}, stream=io.StringIO(), logger_name=_LOGGER)
