"""Tests for runtime settings loading and validation."""

from __future__ import annotations

import pytest

from hook_indexer.config import SettingsLoadError, config_load_database_url, config_load_settings

_REQUIRED_ENVIRONMENT = {
    "RPC_URL": "http://localhost:8545",
    "QUOTE_TOKEN_ADDRESS": "0x" + "aa" * 20,
    "PRIMARY_QUOTER_ADDRESS": "0x" + "01" * 20,
}


def _set_required_environment(monkeypatch, working_directory) -> None:
    monkeypatch.chdir(working_directory)
    for name, value in _REQUIRED_ENVIRONMENT.items():
        monkeypatch.setenv(name, value)


def test_config_load_settings_applies_defaults(monkeypatch, tmp_path) -> None:
    """Load required values from the environment and fill documented defaults.

    Returns:
        None: Assertions validate loaded settings.

    Raises:
        AssertionError: Raised when defaults differ.
    """

    _set_required_environment(monkeypatch, tmp_path)

    settings = config_load_settings()

    assert settings.rpc_url == "http://localhost:8545"
    assert settings.protocol_id == "uniswap-v4-lending-hook"
    assert settings.snapshot_bucket_seconds == 3600
    assert settings.snapshot_trigger_event_kinds == ["swap"]
    assert settings.target_pool_id is None
    assert settings.fallback_quoter_address is None
    assert settings.log_level == "INFO"


def test_config_load_settings_normalizes_values(monkeypatch, tmp_path) -> None:
    """Normalize trigger kinds, log level and blank optional values."""

    _set_required_environment(monkeypatch, tmp_path)
    monkeypatch.setenv("SNAPSHOT_TRIGGER_EVENT_KINDS", '["Swap", " deposit "]')
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("TARGET_POOL_ID", "   ")

    settings = config_load_settings()

    assert settings.snapshot_trigger_event_kinds == ["swap", "deposit"]
    assert settings.log_level == "DEBUG"
    assert settings.target_pool_id is None


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("SNAPSHOT_TRIGGER_EVENT_KINDS", '["mint"]'),
        ("LOG_LEVEL", "verbose"),
        ("SNAPSHOT_BUCKET_SECONDS", "0"),
        ("QUOTE_TOKEN_ADDRESS", "   "),
    ],
)
def test_config_load_settings_rejects_invalid_values(monkeypatch, tmp_path, name: str, value: str) -> None:
    """Wrap validation failures in SettingsLoadError."""

    _set_required_environment(monkeypatch, tmp_path)
    monkeypatch.setenv(name, value)

    with pytest.raises(SettingsLoadError, match="Startup configuration validation failed"):
        config_load_settings()


def test_config_load_settings_requires_rpc_url(monkeypatch, tmp_path) -> None:
    """Fail startup when the RPC endpoint is not configured."""

    _set_required_environment(monkeypatch, tmp_path)
    monkeypatch.delenv("RPC_URL")

    with pytest.raises(SettingsLoadError, match="rpc_url"):
        config_load_settings()


def test_config_load_database_url_reads_environment(monkeypatch, tmp_path) -> None:
    """Return the configured database URL without requiring chain settings."""

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DATABASE_URL", " sqlite:///indexer.db ")
    monkeypatch.delenv("RPC_URL", raising=False)

    assert config_load_database_url() == "sqlite:///indexer.db"
