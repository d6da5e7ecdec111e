"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock for TTL tests
- A recording notification queue that captures issued codes
- A verification workflow wired to in-memory stores
"""

from concurrent.futures import Future
from datetime import UTC, datetime, timedelta

import bcrypt
import pytest

from src.adapters.memory import (
    InMemoryAccountDirectory,
    InMemoryAuthorizationStore,
    InMemoryChallengeStore,
)
from src.domain.models import Purpose
from src.domain.verification import VerificationWorkflow


class FakeClock:
    """Clock returning a fixed instant until advanced."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class RecordingQueue:
    """NotificationQueue that records submissions instead of sending."""

    def __init__(self) -> None:
        self.submitted: list[tuple[str, str, Purpose]] = []

    def submit(self, recipient: str, code: str, purpose: Purpose) -> Future:
        self.submitted.append((recipient, code, purpose))
        future: Future = Future()
        future.set_result(True)
        return future

    def last_code(self) -> str:
        return self.submitted[-1][1]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def queue() -> RecordingQueue:
    return RecordingQueue()


@pytest.fixture
def challenges() -> InMemoryChallengeStore:
    return InMemoryChallengeStore()


@pytest.fixture
def authorizations() -> InMemoryAuthorizationStore:
    return InMemoryAuthorizationStore()


@pytest.fixture
def accounts() -> InMemoryAccountDirectory:
    directory = InMemoryAccountDirectory()
    password_hash = bcrypt.hashpw(b"original-pass", bcrypt.gensalt(4)).decode()
    directory.add("bob@example.com", password_hash)
    return directory


@pytest.fixture
def workflow(
    challenges: InMemoryChallengeStore,
    authorizations: InMemoryAuthorizationStore,
    accounts: InMemoryAccountDirectory,
    queue: RecordingQueue,
    clock: FakeClock,
) -> VerificationWorkflow:
    """Workflow over in-memory stores; bcrypt cost lowered for speed."""
    return VerificationWorkflow(
        challenges=challenges,
        authorizations=authorizations,
        accounts=accounts,
        notifications=queue,
        bcrypt_cost=4,
        clock=clock,
    )
