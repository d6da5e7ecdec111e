"""In-memory adapters - Process-local implementations for development and tests."""

from .accounts import InMemoryAccountDirectory
from .stores import InMemoryAuthorizationStore, InMemoryChallengeStore

__all__ = ["InMemoryAccountDirectory", "InMemoryAuthorizationStore", "InMemoryChallengeStore"]
