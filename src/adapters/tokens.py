"""
JWT token issuer - Implements TokenIssuer protocol with PyJWT.

Session tokens are HS256-signed with a server-held secret. The secret is
read lazily so a misconfigured deployment fails on the first sign-in with
a configuration error instead of minting tokens with a placeholder key.
"""

import logging
from datetime import UTC, datetime, timedelta

import jwt

from src.domain.exceptions import ConfigurationError
from src.domain.models import Account

logger = logging.getLogger(__name__)

_RECOMMENDED_SECRET_LENGTH = 32


class JwtTokenIssuer:
    """
    Implements TokenIssuer protocol via PyJWT.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        secret: str | None,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(days=7),
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = ttl
        self._warned = False

    def issue(self, account: Account) -> str:
        """
        Mint a signed session token for an account.

        Raises:
            ConfigurationError: No usable signing secret is configured
        """
        secret = self._signing_secret()
        now = datetime.now(UTC)
        payload = {
            "sub": account.id,
            "email": account.email,
            "iat": now,
            "exp": now + self._ttl,
        }
        return jwt.encode(payload, secret, algorithm=self._algorithm)

    def _signing_secret(self) -> str:
        if self._secret is None or not self._secret.strip():
            raise ConfigurationError("JWT signing secret is not configured")
        if len(self._secret) < _RECOMMENDED_SECRET_LENGTH and not self._warned:
            logger.warning(
                "JWT secret is only %d characters long; use at least %d",
                len(self._secret),
                _RECOMMENDED_SECRET_LENGTH,
            )
            self._warned = True
        return self._secret
