"""Tests for the package logger factory."""
from __future__ import annotations

import logging

from library_app.utils.logging import get_logger


def test_logger_configured_once():
    first = get_logger("library.test_factory")
    second = get_logger("library.test_factory")
    assert first is second
    assert len(first.handlers) == 1
    assert first.propagate is False


def test_level_follows_environment(monkeypatch):
    monkeypatch.setenv("LIBRARY_LOG_LEVEL", "warning")
    assert get_logger("library.test_factory_level").level == logging.WARNING
