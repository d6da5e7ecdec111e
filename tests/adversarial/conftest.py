"""
Shared fixtures for adversarial tests.

Provides a workflow with the wall clock and lock-protected in-memory
stores, as it runs in production.
"""

import pytest

from src.adapters.memory import InMemoryAuthorizationStore, InMemoryChallengeStore
from src.domain.verification import VerificationWorkflow


@pytest.fixture
def live_workflow(accounts, queue) -> VerificationWorkflow:
    """Workflow using the wall clock; bcrypt cost lowered for speed."""
    return VerificationWorkflow(
        challenges=InMemoryChallengeStore(),
        authorizations=InMemoryAuthorizationStore(),
        accounts=accounts,
        notifications=queue,
        bcrypt_cost=4,
    )
