"""Unit tests for core/config.py -- SECRET_KEY policy and AuthConfig derivation."""

import pytest
from pydantic import ValidationError

from core.config import AuthConfig, Settings


def test_missing_secret_key_is_rejected(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)
    with pytest.raises(ValidationError, match="SECRET_KEY is required"):
        Settings(_env_file=None)


def test_short_secret_key_is_rejected():
    with pytest.raises(ValidationError, match="at least 32 characters"):
        Settings(secret_key="too-short", _env_file=None)


def test_auth_config_from_settings():
    settings = Settings(secret_key="s" * 40, token_expire_seconds=60, _env_file=None)
    config = settings.auth_config()
    assert config == AuthConfig(secret_key="s" * 40, algorithm="HS256", ttl_seconds=60)


def test_secret_key_not_in_repr():
    settings = Settings(secret_key="s" * 40, _env_file=None)
    assert "s" * 40 not in repr(settings)


def test_defaults():
    settings = Settings(secret_key="s" * 40, _env_file=None)
    assert settings.token_header == "x-auth-token"
    assert settings.token_expire_seconds == 360000
    assert settings.github_repo_count == 5
