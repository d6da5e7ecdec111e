"""
Domain value types.

Plain dataclasses passed between the workflow, its stores and the
delivery providers. None of them carry behaviour beyond small helpers.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum


# Purpose values sent by older clients
_LEGACY_PURPOSES = {"forgot_password": "credential_reset"}


class Purpose(str, Enum):
    """What a challenge is for."""

    SIGNUP = "signup"
    CREDENTIAL_RESET = "credential_reset"

    @classmethod
    def parse(cls, value: object) -> "Purpose | None":
        """
        Return the matching Purpose, or None for unrecognized input.

        Also accepts the legacy client value "forgot_password".
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value in _LEGACY_PURPOSES:
            return cls(_LEGACY_PURPOSES[value])
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class Challenge:
    """A pending one-time code for an (identity, purpose) key."""

    identity: str
    purpose: Purpose
    code: str
    created_at: datetime
    attempts: int = 0

    def is_expired(self, now: datetime, ttl: timedelta) -> bool:
        return now - self.created_at > ttl

    def with_attempts(self, attempts: int) -> "Challenge":
        return replace(self, attempts=attempts)


@dataclass(frozen=True)
class ResetAuthorization:
    """Proof that an identity passed a credential_reset challenge."""

    identity: str
    issued_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


@dataclass(frozen=True)
class Account:
    """Account Directory view of a user."""

    id: str
    email: str
    password_hash: str


@dataclass(frozen=True)
class DeliveryResult:
    """
    Outcome of a single provider send.

    error_code is the transport's error class (SMTP exception name, HTTP
    error name); response_code is the upstream SMTP reply code or HTTP status.
    """

    ok: bool
    provider: str
    error: str | None = None
    error_code: str | None = None
    response_code: int | None = None

    @classmethod
    def success(cls, provider: str, response_code: int | None = None) -> "DeliveryResult":
        return cls(ok=True, provider=provider, response_code=response_code)

    @classmethod
    def failure(
        cls,
        provider: str,
        error: str,
        error_code: str | None = None,
        response_code: int | None = None,
    ) -> "DeliveryResult":
        return cls(
            ok=False,
            provider=provider,
            error=error,
            error_code=error_code,
            response_code=response_code,
        )
