"""Tests for structlog setup."""

from __future__ import annotations

import logging

import pytest
import structlog

from docgen.core.logging import get_logger, setup_logging


@pytest.fixture
def restore_logging():
    yield
    setup_logging("WARNING", json_output=False)


def test_json_output_and_level(restore_logging):
    setup_logging("warn", json_output=True)

    processors = structlog.get_config()["processors"]
    assert isinstance(processors[-1], structlog.processors.JSONRenderer)
    assert logging.getLogger().level == logging.WARNING


def test_console_output_in_development(restore_logging):
    setup_logging("DEBUG", json_output=False)

    processors = structlog.get_config()["processors"]
    assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
    assert logging.getLogger().level == logging.DEBUG


def test_get_logger_accepts_key_values():
    get_logger("docgen.tests").info("Artifact created", artifact_id="art-1")
