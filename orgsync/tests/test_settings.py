"""Tests for environment-driven settings."""

import pytest

from orgsync.config.settings import (
    DEFAULT_PORT,
    load_settings,
    normalize_database_url,
)
from orgsync.models import MemberRole, map_clerk_role


_ENV_KEYS = (
    "DATABASE_URL",
    "PORT",
    "CLERK_WEBHOOK_SECRET",
    "CLERK_ISSUER_URL",
    "CLERK_JWKS_URL",
    "CLERK_JWT_KEY",
    "CLERK_AUTHORIZED_PARTIES",
    "ALLOWED_ORIGINS",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Empty configuration environment, run from a directory without .env."""
    for key in _ENV_KEYS:
        # setenv first so values loaded from .env are removed on teardown
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    monkeypatch.setenv("ENV", "test")
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestLoadSettings:

    def test_defaults(self, clean_env):
        settings = load_settings()

        assert settings.port == DEFAULT_PORT
        assert settings.database_url is None
        assert settings.allowed_origins == ["http://localhost:3000"]
        assert settings.clerk.webhook_secret is None
        assert not settings.clerk.token_verification_configured
        assert not settings.is_production

    def test_reads_environment(self, clean_env):
        clean_env.setenv("DATABASE_URL", "postgres://u:p@db:5432/app")
        clean_env.setenv("PORT", "9000")
        clean_env.setenv("CLERK_WEBHOOK_SECRET", "whsec_abc")
        clean_env.setenv("CLERK_ISSUER_URL", "https://clerk.example.com")
        clean_env.setenv("CLERK_AUTHORIZED_PARTIES", "https://a.example.com, https://b.example.com")
        clean_env.setenv("ALLOWED_ORIGINS", "https://app.example.com,")

        settings = load_settings()

        assert settings.database_url == "postgresql://u:p@db:5432/app"
        assert settings.port == 9000
        assert settings.clerk.webhook_secret == "whsec_abc"
        assert settings.clerk.resolved_jwks_url == "https://clerk.example.com/.well-known/jwks.json"
        assert settings.clerk.authorized_parties == ["https://a.example.com", "https://b.example.com"]
        assert settings.allowed_origins == ["https://app.example.com"]

    def test_dotenv_file_loaded_outside_production(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text("CLERK_WEBHOOK_SECRET=whsec_from_file\n")

        assert load_settings().clerk.webhook_secret == "whsec_from_file"

    def test_environment_wins_over_dotenv(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text("PORT=7000\n")
        clean_env.setenv("PORT", "9100")

        assert load_settings().port == 9100

    def test_invalid_port(self, clean_env):
        clean_env.setenv("PORT", "eighty")

        with pytest.raises(ValueError):
            load_settings()


def test_normalize_database_url():
    assert normalize_database_url("postgres://x") == "postgresql://x"
    assert normalize_database_url("postgresql://x") == "postgresql://x"
    assert normalize_database_url(None) is None


@pytest.mark.parametrize("clerk_role,expected", [
    ("admin", MemberRole.ADMIN),
    ("org:admin", MemberRole.ADMIN),
    ("basic_member", MemberRole.MEMBER),
    ("org:member", MemberRole.MEMBER),
    ("owner", MemberRole.MEMBER),
    ("", MemberRole.MEMBER),
    (None, MemberRole.MEMBER),
])
def test_map_clerk_role(clerk_role, expected):
    assert map_clerk_role(clerk_role) == expected
