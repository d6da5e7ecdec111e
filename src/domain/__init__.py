"""
Domain layer - Pure business logic with zero framework imports.

This package contains the OTP challenge state machine, the out-of-band
delivery dispatcher and the sign-in service. It defines its own port
interfaces for infrastructure abstraction, ensuring true hexagonal
architecture decoupling.
"""

from .authentication import SignInService
from .dispatcher import NotificationDispatcher
from .exceptions import ConfigurationError, ProviderConfigurationError, VerificationError
from .models import Account, Challenge, DeliveryResult, Purpose, ResetAuthorization
from .ports import (
    AccountDirectory,
    AuthorizationStore,
    ChallengeStore,
    EmailProvider,
    IssueOutcome,
    NotificationQueue,
    ResetOutcome,
    TokenIssuer,
    VerifyOutcome,
)
from .verification import IssueResult, VerificationWorkflow, VerifyResult

__all__ = [
    "Account",
    "AccountDirectory",
    "AuthorizationStore",
    "Challenge",
    "ChallengeStore",
    "ConfigurationError",
    "DeliveryResult",
    "EmailProvider",
    "IssueOutcome",
    "IssueResult",
    "NotificationDispatcher",
    "NotificationQueue",
    "ProviderConfigurationError",
    "Purpose",
    "ResetAuthorization",
    "ResetOutcome",
    "SignInService",
    "TokenIssuer",
    "VerificationError",
    "VerificationWorkflow",
    "VerifyOutcome",
    "VerifyResult",
]
