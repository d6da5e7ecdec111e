"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure, plus the closed outcome enumerations returned by
the verification workflow. Adapters implement these protocols.
"""

from concurrent.futures import Future
from enum import Enum
from typing import Protocol

from .models import Account, Challenge, DeliveryResult, Purpose, ResetAuthorization


class IssueOutcome(Enum):
    """Result of a challenge issuance request."""

    SUCCESS = "success"
    MISSING_IDENTITY = "missing_identity"
    INVALID_IDENTITY = "invalid_identity"
    INVALID_PURPOSE = "invalid_purpose"


class VerifyOutcome(Enum):
    """
    Result of a verification attempt.

    Members are listed in the priority order in which verify_challenge()
    checks them; the first failing check decides the outcome.
    """

    MISSING_PARAMETERS = "missing_parameters"
    INVALID_CODE_FORMAT = "invalid_code_format"
    INVALID_PURPOSE = "invalid_purpose"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    TOO_MANY_ATTEMPTS = "too_many_attempts"
    MISMATCH = "mismatch"
    SUCCESS = "success"


class ResetOutcome(Enum):
    """Result of a credential reset request."""

    MISSING_PARAMETERS = "missing_parameters"
    INVALID_CREDENTIAL = "invalid_credential"
    NOT_VERIFIED = "not_verified"
    VERIFICATION_EXPIRED = "verification_expired"
    ACCOUNT_NOT_FOUND = "account_not_found"
    SUCCESS = "success"


class ChallengeStore(Protocol):
    """
    Port interface for pending challenges keyed by (identity, purpose).

    Stores keep raw timestamps only. TTLs are applied by the workflow when
    an entry is read, so an expired entry stays in place until looked up.
    The workflow serializes access within one process; writes that decide
    an outcome (increment_attempts, consume) must also be atomic across
    processes sharing the store.
    """

    def get(self, identity: str, purpose: Purpose) -> Challenge | None:
        """Return the stored challenge, expired or not, or None."""
        ...

    def put(self, challenge: Challenge) -> None:
        """Store a challenge, replacing any entry under the same key."""
        ...

    def delete(self, identity: str, purpose: Purpose) -> None:
        """Remove the entry for the key if present."""
        ...

    def increment_attempts(self, identity: str, purpose: Purpose) -> int | None:
        """
        Increment the failed-attempt counter.

        Returns:
            The counter value after the increment, or None if no entry exists
        """
        ...

    def consume(self, challenge: Challenge) -> bool:
        """
        Delete exactly this challenge if it is still stored with the same
        code and issue time. The attempt counter is not compared.

        Returns:
            True for the one caller that removed it
        """
        ...


class AuthorizationStore(Protocol):
    """Port interface for credential-reset authorizations keyed by identity."""

    def get(self, identity: str) -> ResetAuthorization | None:
        ...

    def put(self, authorization: ResetAuthorization) -> None:
        ...

    def delete(self, identity: str) -> None:
        ...

    def consume(self, authorization: ResetAuthorization) -> bool:
        """
        Delete exactly this authorization if it is still stored.

        Returns:
            True for the one caller that removed it
        """
        ...


class AccountDirectory(Protocol):
    """Port interface for the user-account collaborator."""

    def find_by_identity(self, identity: str) -> Account | None:
        """
        Look up an account by normalized email address.

        Args:
            identity: Normalized email address

        Returns:
            The account, or None when no account uses the address
        """
        ...

    def update_credential(self, account_id: str, hashed_credential: str) -> None:
        """Replace the stored password hash for an account."""
        ...


class EmailProvider(Protocol):
    """Port interface for a single email transport."""

    name: str

    def send(
        self, recipient: str, subject: str, html_body: str, text_body: str
    ) -> DeliveryResult:
        """
        Send one message.

        Transport failures are returned as a failed DeliveryResult.
        Missing configuration raises ProviderConfigurationError.
        """
        ...


class NotificationQueue(Protocol):
    """Port interface for out-of-band challenge delivery."""

    def submit(self, recipient: str, code: str, purpose: Purpose) -> Future:
        """
        Schedule delivery of a challenge code and return immediately.

        The returned future completes when delivery has finished, successfully
        or not. Callers on the request path never wait on it.
        """
        ...


class TokenIssuer(Protocol):
    """Port interface for session token minting."""

    def issue(self, account: Account) -> str:
        ...
