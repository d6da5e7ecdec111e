"""
Unit tests for settings and component wiring.
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from src.adapters.email import ConsoleEmailProvider, SendGridEmailProvider, SmtpEmailProvider
from src.adapters.memory import InMemoryAccountDirectory, InMemoryChallengeStore
from src.adapters.postgres import PostgresAccountDirectory, PostgresChallengeStore
from src.api.wiring import (
    build_components,
    build_fallback_provider,
    build_primary_provider,
    needs_database,
)
from src.config.settings import Settings, get_settings


def make_settings(**overrides) -> Settings:
    values = {
        "verification_store_backend": "memory",
        "account_directory_backend": "memory",
        "email_provider": "console",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def components():
    built = []

    def build(settings: Settings, pool=None):
        result = build_components(settings, pool)
        built.append(result)
        return result

    yield build
    for result in built:
        result.dispatcher.shutdown(wait=False)


class TestSettings:
    """Tests for Settings defaults and environment loading."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("ENVIRONMENT", "MAX_ATTEMPTS", "CHALLENGE_TTL_SECONDS"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.challenge_ttl_seconds == 300
        assert settings.authorization_ttl_seconds == 600
        assert settings.max_attempts == 3
        assert settings.min_credential_length == 6
        assert settings.delivery_retries == 2
        assert settings.is_production is False

    def test_environment_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "Production")
        monkeypatch.setenv("MAX_ATTEMPTS", "5")

        settings = Settings(_env_file=None)

        assert settings.max_attempts == 5
        assert settings.is_production is True

    def test_get_settings_is_cached(self) -> None:
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()


class TestProviders:
    """Tests for provider selection."""

    def test_console_primary(self) -> None:
        assert isinstance(build_primary_provider(make_settings()), ConsoleEmailProvider)

    def test_smtp_primary(self) -> None:
        provider = build_primary_provider(make_settings(email_provider="smtp"))
        assert isinstance(provider, SmtpEmailProvider)

    def test_no_fallback_without_api_key(self) -> None:
        assert build_fallback_provider(make_settings()) is None

    def test_sendgrid_fallback_with_api_key(self) -> None:
        provider = build_fallback_provider(make_settings(sendgrid_api_key="SG.key"))
        assert isinstance(provider, SendGridEmailProvider)


class TestBuildComponents:
    """Tests for build_components."""

    def test_memory_backends(self, components) -> None:
        built = components(make_settings())

        assert isinstance(built.workflow.challenges, InMemoryChallengeStore)
        assert isinstance(built.workflow.accounts, InMemoryAccountDirectory)
        assert built.sign_in_service.accounts is built.workflow.accounts
        assert built.workflow.notifications is built.dispatcher

    def test_settings_flow_into_workflow(self, components) -> None:
        built = components(
            make_settings(
                challenge_ttl_seconds=120,
                authorization_ttl_seconds=900,
                max_attempts=5,
                min_credential_length=8,
            )
        )

        assert built.workflow.challenge_ttl == timedelta(seconds=120)
        assert built.workflow.authorization_ttl == timedelta(seconds=900)
        assert built.workflow.max_attempts == 5
        assert built.workflow.min_credential_length == 8

    def test_postgres_backends_use_pool(self, components) -> None:
        pool = MagicMock()
        settings = make_settings(
            verification_store_backend="postgres", account_directory_backend="postgres"
        )

        built = components(settings, pool)

        assert needs_database(settings) is True
        assert isinstance(built.workflow.challenges, PostgresChallengeStore)
        assert isinstance(built.workflow.accounts, PostgresAccountDirectory)

    def test_memory_backends_need_no_database(self) -> None:
        assert needs_database(make_settings()) is False

    @pytest.mark.parametrize(
        "overrides",
        [
            {"verification_store_backend": "postgres"},
            {"account_directory_backend": "postgres"},
        ],
    )
    def test_postgres_without_pool_rejected(self, components, overrides) -> None:
        with pytest.raises(ValueError):
            components(make_settings(**overrides))
