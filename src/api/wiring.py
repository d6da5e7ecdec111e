"""
Component wiring - Builds adapters and domain services from settings.

Called once from the application lifespan. Backend choices:
- VERIFICATION_STORE_BACKEND: memory | postgres
- ACCOUNT_DIRECTORY_BACKEND: memory | postgres
- EMAIL_PROVIDER: smtp | console (primary); SendGrid fallback when
  SENDGRID_API_KEY is set
"""

from dataclasses import dataclass
from datetime import timedelta

from psycopg_pool import ConnectionPool

from src.adapters.email import ConsoleEmailProvider, SendGridEmailProvider, SmtpEmailProvider
from src.adapters.memory import (
    InMemoryAccountDirectory,
    InMemoryAuthorizationStore,
    InMemoryChallengeStore,
)
from src.adapters.postgres import (
    PostgresAccountDirectory,
    PostgresAuthorizationStore,
    PostgresChallengeStore,
)
from src.adapters.tokens import JwtTokenIssuer
from src.config.settings import Settings
from src.domain.authentication import SignInService
from src.domain.dispatcher import NotificationDispatcher
from src.domain.ports import AccountDirectory, EmailProvider
from src.domain.verification import VerificationWorkflow


@dataclass
class Components:
    """Long-lived services shared by every request."""

    workflow: VerificationWorkflow
    sign_in_service: SignInService
    dispatcher: NotificationDispatcher


def needs_database(settings: Settings) -> bool:
    return "postgres" in (
        settings.verification_store_backend,
        settings.account_directory_backend,
    )


def build_primary_provider(settings: Settings) -> EmailProvider:
    if settings.email_provider == "console":
        return ConsoleEmailProvider()
    return SmtpEmailProvider(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_username,
        password=settings.smtp_password,
        from_email=settings.smtp_from_email,
        from_name=settings.smtp_from_name,
        use_ssl=settings.smtp_use_ssl,
        timeout=settings.delivery_timeout_seconds,
    )


def build_fallback_provider(settings: Settings) -> EmailProvider | None:
    if not settings.sendgrid_api_key:
        return None
    return SendGridEmailProvider(
        api_key=settings.sendgrid_api_key,
        from_email=settings.sendgrid_from_email or settings.smtp_from_email,
        from_name=settings.sendgrid_from_name,
        api_url=settings.sendgrid_api_url,
        timeout=settings.delivery_timeout_seconds,
    )


def build_dispatcher(settings: Settings) -> NotificationDispatcher:
    return NotificationDispatcher(
        build_primary_provider(settings),
        build_fallback_provider(settings),
        retries=settings.delivery_retries,
        backoff_seconds=settings.delivery_backoff_seconds,
        brand=settings.brand_name,
        ttl_minutes=max(1, settings.challenge_ttl_seconds // 60),
        reveal_codes=not settings.is_production,
        max_workers=settings.dispatcher_workers,
    )


def build_account_directory(
    settings: Settings, pool: ConnectionPool | None
) -> AccountDirectory:
    if settings.account_directory_backend == "postgres":
        if pool is None:
            raise ValueError("PostgreSQL account directory requires a connection pool")
        return PostgresAccountDirectory(pool)
    return InMemoryAccountDirectory()


def build_components(settings: Settings, pool: ConnectionPool | None = None) -> Components:
    """Wire stores, account directory, dispatcher and services together."""
    if settings.verification_store_backend == "postgres":
        if pool is None:
            raise ValueError("PostgreSQL verification stores require a connection pool")
        challenges = PostgresChallengeStore(pool)
        authorizations = PostgresAuthorizationStore(pool)
    else:
        challenges = InMemoryChallengeStore()
        authorizations = InMemoryAuthorizationStore()

    accounts = build_account_directory(settings, pool)
    dispatcher = build_dispatcher(settings)

    workflow = VerificationWorkflow(
        challenges=challenges,
        authorizations=authorizations,
        accounts=accounts,
        notifications=dispatcher,
        challenge_ttl=timedelta(seconds=settings.challenge_ttl_seconds),
        authorization_ttl=timedelta(seconds=settings.authorization_ttl_seconds),
        max_attempts=settings.max_attempts,
        min_credential_length=settings.min_credential_length,
        bcrypt_cost=settings.bcrypt_cost,
    )
    sign_in_service = SignInService(
        accounts=accounts,
        token_issuer=JwtTokenIssuer(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            ttl=timedelta(seconds=settings.jwt_ttl_seconds),
        ),
    )
    return Components(
        workflow=workflow, sign_in_service=sign_in_service, dispatcher=dispatcher
    )
