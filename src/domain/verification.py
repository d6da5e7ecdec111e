"""
Verification domain service - OTP challenge state machine.

This module contains the core business logic for one-time-code
verification and the credential reset that follows it.

Challenge State Machine (per identity, purpose)
===============================================

States:
- NO_CHALLENGE: Nothing stored for the key
- PENDING: Challenge stored, waiting for the code
- AUTHORIZED: credential_reset only - challenge verified, reset allowed once

Transitions:
    NO_CHALLENGE -> PENDING       (issue_challenge)
    PENDING      -> PENDING       (issue_challenge again: fresh code, attempts = 0)
    PENDING      -> NO_CHALLENGE  (signup verified, expiry, attempts exhausted)
    PENDING      -> AUTHORIZED    (credential_reset verified)
    AUTHORIZED   -> NO_CHALLENGE  (reset_credential succeeds, or authorization expires)

Expiry is lazy: an expired entry is removed the next time it is read.

Both stores are mutated only here. Each is guarded by its own lock and the
challenge lock is always taken before the authorization lock. Delivery,
password hashing and account updates run with no lock held.

The locks only serialize one process. When several workers share the
stores, the deciding writes are the stores' atomic increment_attempts
and consume calls: a code is compared only after its submission claims
an attempt slot, and SUCCESS or a reset is reported only by the caller
whose consume removed the record.
"""

import logging
import re
import secrets
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import bcrypt

from .models import Challenge, Purpose, ResetAuthorization
from .ports import (
    AccountDirectory,
    AuthorizationStore,
    ChallengeStore,
    IssueOutcome,
    NotificationQueue,
    ResetOutcome,
    VerifyOutcome,
)

logger = logging.getLogger(__name__)

_EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_CODE_PATTERN = re.compile(r"[0-9]{6}")

# Longest password bcrypt accepts, in UTF-8 bytes
MAX_CREDENTIAL_BYTES = 72


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class IssueResult:
    outcome: IssueOutcome
    identity: str | None = None
    purpose: Purpose | None = None


@dataclass(frozen=True)
class VerifyResult:
    outcome: VerifyOutcome
    identity: str | None = None
    purpose: Purpose | None = None


@dataclass
class VerificationWorkflow:
    """
    Domain service orchestrating challenge issuance, verification and reset.

    Coordinates the challenge store, the reset-authorization store, the
    account directory and the notification queue.
    """

    challenges: ChallengeStore
    authorizations: AuthorizationStore
    accounts: AccountDirectory
    notifications: NotificationQueue
    challenge_ttl: timedelta = timedelta(minutes=5)
    authorization_ttl: timedelta = timedelta(minutes=10)
    max_attempts: int = 3
    min_credential_length: int = 6
    bcrypt_cost: int = 10
    clock: Callable[[], datetime] = _utcnow
    _challenge_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _authorization_lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )

    def issue_challenge(self, raw_identity: str | None, purpose: object) -> IssueResult:
        """
        Create a fresh challenge and schedule its delivery.

        For credential_reset against an unknown identity the result is the
        same SUCCESS, but nothing is stored or sent, so callers cannot tell
        registered addresses from unregistered ones.

        Args:
            raw_identity: Email address as submitted (will be normalized)
            purpose: "signup" or "credential_reset"

        Returns:
            IssueResult carrying the normalized identity on SUCCESS
        """
        if raw_identity is None or not raw_identity.strip():
            return IssueResult(IssueOutcome.MISSING_IDENTITY)

        identity = self._normalize_identity(raw_identity)
        if not _EMAIL_PATTERN.fullmatch(identity):
            return IssueResult(IssueOutcome.INVALID_IDENTITY)

        parsed_purpose = Purpose.parse(purpose)
        if parsed_purpose is None:
            return IssueResult(IssueOutcome.INVALID_PURPOSE)

        if parsed_purpose is Purpose.CREDENTIAL_RESET:
            if self.accounts.find_by_identity(identity) is None:
                logger.warning("Credential reset requested for unknown identity %s", identity)
                return IssueResult(IssueOutcome.SUCCESS, identity, parsed_purpose)

        code = self._generate_code()
        challenge = Challenge(
            identity=identity,
            purpose=parsed_purpose,
            code=code,
            created_at=self.clock(),
        )
        with self._challenge_lock:
            self.challenges.put(challenge)

        logger.info("Challenge issued: identity=%s purpose=%s", identity, parsed_purpose.value)
        self._dispatch(identity, code, parsed_purpose)
        return IssueResult(IssueOutcome.SUCCESS, identity, parsed_purpose)

    def verify_challenge(
        self, raw_identity: str | None, code: str | None, purpose: object
    ) -> VerifyResult:
        """
        Check a submitted code against the pending challenge.

        Checks run in VerifyOutcome order. Side effects:
        - EXPIRED, TOO_MANY_ATTEMPTS: challenge deleted
        - Every submission that reaches the code comparison increments the
          attempt counter; the mismatch that reaches max_attempts deletes
          the challenge and reports TOO_MANY_ATTEMPTS
        - SUCCESS: challenge consumed; for credential_reset a
          ResetAuthorization is written first and withdrawn again if
          another caller consumed the challenge (NOT_FOUND)

        Args:
            raw_identity: Email address as submitted (will be normalized)
            code: 6-digit code
            purpose: "signup" or "credential_reset"

        Returns:
            VerifyResult indicating success or the specific failure
        """
        if not raw_identity or not raw_identity.strip() or not code:
            return VerifyResult(VerifyOutcome.MISSING_PARAMETERS)

        if not _CODE_PATTERN.fullmatch(code):
            return VerifyResult(VerifyOutcome.INVALID_CODE_FORMAT)

        parsed_purpose = Purpose.parse(purpose)
        if parsed_purpose is None:
            return VerifyResult(VerifyOutcome.INVALID_PURPOSE)

        identity = self._normalize_identity(raw_identity)
        outcome = self._check_code(identity, code, parsed_purpose)
        return VerifyResult(outcome, identity, parsed_purpose)

    def reset_credential(
        self, raw_identity: str | None, new_credential: str | None
    ) -> ResetOutcome:
        """
        Replace an account's password after a verified credential_reset.

        Requires that no live credential_reset challenge remains and that a
        live ResetAuthorization exists. The new password is hashed first,
        then the authorization is consumed, so it can be used at most once.
        If the account update raises, the authorization is put back and the
        error propagates.

        The password is stored exactly as submitted: surrounding whitespace
        is kept, not trimmed. bcrypt cannot hash more than 72 bytes, so
        longer passwords are rejected as INVALID_CREDENTIAL.

        Args:
            raw_identity: Email address as submitted (will be normalized)
            new_credential: New plaintext password

        Returns:
            ResetOutcome indicating success or the specific failure
        """
        if not raw_identity or not raw_identity.strip() or not new_credential:
            return ResetOutcome.MISSING_PARAMETERS

        if (
            len(new_credential) < self.min_credential_length
            or len(new_credential.encode()) > MAX_CREDENTIAL_BYTES
        ):
            return ResetOutcome.INVALID_CREDENTIAL

        identity = self._normalize_identity(raw_identity)
        now = self.clock()

        with self._challenge_lock:
            pending = self.challenges.get(identity, Purpose.CREDENTIAL_RESET)
            if pending is not None:
                if not pending.is_expired(now, self.challenge_ttl):
                    return ResetOutcome.NOT_VERIFIED
                self.challenges.delete(identity, Purpose.CREDENTIAL_RESET)

            with self._authorization_lock:
                authorization = self.authorizations.get(identity)
                if authorization is None:
                    return ResetOutcome.NOT_VERIFIED
                if authorization.is_expired(now):
                    self.authorizations.consume(authorization)
                    logger.info("Reset authorization expired: identity=%s", identity)
                    return ResetOutcome.VERIFICATION_EXPIRED

        account = self.accounts.find_by_identity(identity)
        if account is None:
            with self._authorization_lock:
                self.authorizations.consume(authorization)
            logger.warning("Reset authorization consumed for vanished account %s", identity)
            return ResetOutcome.ACCOUNT_NOT_FOUND

        hashed = self._hash_credential(new_credential)

        with self._authorization_lock:
            if not self.authorizations.consume(authorization):
                return ResetOutcome.NOT_VERIFIED

        try:
            self.accounts.update_credential(account.id, hashed)
        except Exception:
            with self._authorization_lock:
                self.authorizations.put(authorization)
            logger.error("Credential update failed, authorization restored: identity=%s", identity)
            raise

        logger.info("Credential reset: identity=%s account_id=%s", identity, account.id)
        return ResetOutcome.SUCCESS

    def _check_code(self, identity: str, code: str, purpose: Purpose) -> VerifyOutcome:
        now = self.clock()
        with self._challenge_lock:
            challenge = self.challenges.get(identity, purpose)
            if challenge is None:
                return VerifyOutcome.NOT_FOUND

            if challenge.is_expired(now, self.challenge_ttl):
                self.challenges.delete(identity, purpose)
                return VerifyOutcome.EXPIRED

            if challenge.attempts >= self.max_attempts:
                self.challenges.delete(identity, purpose)
                return VerifyOutcome.TOO_MANY_ATTEMPTS

            # Every compared submission holds one attempt slot, so workers
            # sharing a store cannot compare more than max_attempts codes.
            attempts = self.challenges.increment_attempts(identity, purpose)
            if attempts is None:
                return VerifyOutcome.NOT_FOUND
            if attempts > self.max_attempts:
                self.challenges.delete(identity, purpose)
                return VerifyOutcome.TOO_MANY_ATTEMPTS

            if not secrets.compare_digest(challenge.code.encode(), code.encode()):
                if attempts >= self.max_attempts:
                    self.challenges.delete(identity, purpose)
                    logger.warning(
                        "Challenge locked out: identity=%s purpose=%s", identity, purpose.value
                    )
                    return VerifyOutcome.TOO_MANY_ATTEMPTS
                return VerifyOutcome.MISMATCH

            authorization = None
            if purpose is Purpose.CREDENTIAL_RESET:
                authorization = ResetAuthorization(
                    identity=identity,
                    issued_at=now,
                    expires_at=now + self.authorization_ttl,
                )
                with self._authorization_lock:
                    self.authorizations.put(authorization)

            if not self.challenges.consume(challenge):
                # Another worker consumed, re-issued or locked the challenge first
                if authorization is not None:
                    with self._authorization_lock:
                        self.authorizations.consume(authorization)
                return VerifyOutcome.NOT_FOUND

        logger.info("Challenge verified: identity=%s purpose=%s", identity, purpose.value)
        return VerifyOutcome.SUCCESS

    def _dispatch(self, identity: str, code: str, purpose: Purpose) -> None:
        try:
            self.notifications.submit(identity, code, purpose)
        except Exception:
            # Stored challenge stays valid; re-issuing retries delivery
            logger.exception(
                "Could not schedule challenge delivery: identity=%s purpose=%s",
                identity,
                purpose.value,
            )

    def _normalize_identity(self, identity: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return identity.strip().lower()

    def _generate_code(self) -> str:
        """
        Generate a 6-digit code uniformly from 100000-999999.

        Uses secrets module for cryptographic randomness.
        """
        return str(100000 + secrets.randbelow(900000))

    def _hash_credential(self, credential: str) -> str:
        """Hash a password using bcrypt with the configured cost factor."""
        return bcrypt.hashpw(credential.encode(), bcrypt.gensalt(rounds=self.bcrypt_cost)).decode()
