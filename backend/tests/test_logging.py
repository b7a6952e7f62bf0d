"""
Tests for logging setup.
"""

from __future__ import annotations

import logging

import pytest

from taskapi.core.logging import QUIET_LOGGERS, configure_logging, resolve_level


@pytest.fixture
def restore_levels():
    names = ["", *QUIET_LOGGERS]
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


@pytest.mark.parametrize(
    "name, expected",
    [("DEBUG", logging.DEBUG), ("warning", logging.WARNING), (" error ", logging.ERROR), ("chatty", logging.INFO)],
)
def test_resolve_level(name, expected):
    assert resolve_level(name) == expected


def test_configure_logging_sets_root_level(restore_levels):
    configure_logging("debug")

    assert logging.getLogger().level == logging.DEBUG


def test_configure_logging_keeps_third_party_loggers_quiet(restore_levels):
    configure_logging("DEBUG")

    assert logging.getLogger("passlib").level == logging.ERROR
    assert logging.getLogger("PIL").level == logging.WARNING


def test_configure_logging_defaults_to_settings(restore_levels, monkeypatch):
    from taskapi.core import logging as logging_module

    monkeypatch.setattr(logging_module.settings, "LOG_LEVEL", "WARNING")

    configure_logging()

    assert logging.getLogger().level == logging.WARNING
