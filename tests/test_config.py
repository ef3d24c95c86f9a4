"""Tests for settings and logging setup."""

import logging

import structlog
from workflow_builder.config import DEFAULT_MERCHANT_ID, get_settings
from workflow_builder.query.assembler import assemble
from workflow_builder.telemetry import configure_logging


def test_default_settings():
    get_settings.cache_clear()
    settings = get_settings()

    assert settings.default_merchant_id == DEFAULT_MERCHANT_ID
    assert settings.log_level == "INFO"


def test_merchant_id_from_environment(monkeypatch):
    """The merchant filter follows WORKFLOW_BUILDER_DEFAULT_MERCHANT_ID."""
    monkeypatch.setenv("WORKFLOW_BUILDER_DEFAULT_MERCHANT_ID", "shop-from-env")
    get_settings.cache_clear()
    try:
        assert assemble([]) == {"contacts": {"select": ["user_id"], "where": {"merchant_id": "shop-from-env"}}}
    finally:
        get_settings.cache_clear()


def test_configure_logging_sets_level():
    root = logging.getLogger()
    previous = root.level
    try:
        configure_logging(level="debug", json=True)

        assert structlog.is_configured()
        assert root.level == logging.DEBUG
        structlog.stdlib.get_logger("workflow_builder.test").debug("configured", check=True)
    finally:
        root.setLevel(previous)
        structlog.reset_defaults()
