"""
Sign-in domain service.

Checks a password against the Account Directory and mints a session token.
Used downstream of the verification flow once an account has a password.
"""

import logging
from dataclasses import dataclass

import bcrypt

from .ports import AccountDirectory, TokenIssuer

logger = logging.getLogger(__name__)

# bcrypt hash of a throwaway password with cost factor 10.
# Checked when the account does not exist so response time does not
# reveal which addresses are registered.
_DUMMY_BCRYPT_HASH = bcrypt.hashpw(b"dummy_password_for_timing_safety", bcrypt.gensalt(10))


@dataclass
class SignInService:
    """Domain service for password sign-in."""

    accounts: AccountDirectory
    token_issuer: TokenIssuer

    def sign_in(self, raw_identity: str, password: str) -> str | None:
        """
        Authenticate by email and password.

        Args:
            raw_identity: Email address as submitted (will be normalized)
            password: Plaintext password

        Returns:
            Signed session token, or None when the credentials do not match

        Raises:
            ConfigurationError: The token issuer has no signing secret
        """
        identity = raw_identity.strip().lower()
        account = self.accounts.find_by_identity(identity)

        stored_hash = account.password_hash.encode() if account is not None else _DUMMY_BCRYPT_HASH
        try:
            password_valid = bcrypt.checkpw(password.encode(), stored_hash)
        except ValueError:
            # Malformed stored hash, or a password past bcrypt's 72-byte limit
            password_valid = False

        if account is None or not password_valid:
            logger.info("Sign-in rejected for %s", identity)
            return None

        return self.token_issuer.issue(account)
