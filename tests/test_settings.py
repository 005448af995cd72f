"""Typed smoke tests for the settings loader.

These tests verify four guarantees:
1) Importing the module-level `settings` yields a `Settings` instance.
2) Environment variables override defaults after clearing the loader cache.
3) Renderer knobs (width, sandbox limits, auto-run) are read from the env.
4) `get_logger()` respects the configured LOG_LEVEL when constructing loggers.
"""

from __future__ import annotations

import logging
from typing import Any

import pytest
from pydantic import ValidationError

from blockdoc.core.settings import (
    Settings,
    get_logger,
    load_settings,
    settings,
)


def test_settings_instance_type() -> None:
    """`settings` should be an instance of the typed `Settings` model."""
    assert isinstance(settings, Settings)


def test_env_overrides_with_cache_clear(monkeypatch: Any) -> None:
    """Changing env vars should take effect after `load_settings.cache_clear()`."""
    monkeypatch.setenv("BLOCKDOC_ENV", "test")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    load_settings.cache_clear()
    s = load_settings()

    assert s.environment == "test"
    assert s.is_test and not s.is_dev and not s.is_prod
    assert s.log_level == "DEBUG"
    assert s.log_level_numeric() == logging.DEBUG


def test_renderer_knobs_from_env(monkeypatch: Any) -> None:
    monkeypatch.setenv("BLOCKDOC_MAX_WIDTH", "72ch")
    monkeypatch.setenv("BLOCKDOC_EXEC_TIMEOUT_MS", "250")
    monkeypatch.setenv("BLOCKDOC_AUTO_RUN_EMBEDS", "true")

    load_settings.cache_clear()
    s = load_settings()

    assert s.max_width == "72ch"
    assert s.exec_timeout_ms == 250
    assert s.auto_run_embeds is True


def test_defaults_keep_auto_run_off(monkeypatch: Any) -> None:
    for name in ("BLOCKDOC_AUTO_RUN_EMBEDS", "BLOCKDOC_MAX_WIDTH", "BLOCKDOC_EXEC_TIMEOUT_MS"):
        monkeypatch.delenv(name, raising=False)
    s = Settings(_env_file=None)
    assert s.auto_run_embeds is False
    assert s.max_width == "900px"
    assert s.exec_timeout_ms == 2000
    assert Settings(_env_file=None, exec_timeout_ms=10).exec_timeout_ms == 10


def test_invalid_limits_are_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(exec_timeout_ms=0)
    with pytest.raises(ValidationError):
        Settings(exec_max_memory=1024)


def test_get_logger_respects_level(monkeypatch: Any) -> None:
    """`get_logger()` should apply the numeric level derived from `LOG_LEVEL`."""
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    load_settings.cache_clear()
    _ = load_settings()

    logger_name = "blockdoc.tests.settings"
    logger = get_logger(logger_name)

    assert logger.level == logging.ERROR
    assert logger.handlers, "Expected at least one StreamHandler to be attached."
