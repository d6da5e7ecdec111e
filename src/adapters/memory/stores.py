"""
In-memory store adapters - Implement ChallengeStore and AuthorizationStore.

Entries live in plain dicts owned by one process. They are lost on restart
and never shared between processes. The verification workflow serializes
every access, so these classes do no locking of their own.
"""

from src.domain.models import Challenge, Purpose, ResetAuthorization


class InMemoryChallengeStore:
    """
    Implements ChallengeStore protocol with a dict keyed by (identity, purpose).

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str, Purpose], Challenge] = {}

    def get(self, identity: str, purpose: Purpose) -> Challenge | None:
        return self._entries.get((identity, purpose))

    def put(self, challenge: Challenge) -> None:
        self._entries[(challenge.identity, challenge.purpose)] = challenge

    def delete(self, identity: str, purpose: Purpose) -> None:
        self._entries.pop((identity, purpose), None)

    def increment_attempts(self, identity: str, purpose: Purpose) -> int | None:
        challenge = self._entries.get((identity, purpose))
        if challenge is None:
            return None
        updated = challenge.with_attempts(challenge.attempts + 1)
        self._entries[(identity, purpose)] = updated
        return updated.attempts

    def consume(self, challenge: Challenge) -> bool:
        key = (challenge.identity, challenge.purpose)
        current = self._entries.get(key)
        if (
            current is None
            or current.code != challenge.code
            or current.created_at != challenge.created_at
        ):
            return False
        del self._entries[key]
        return True

    def __len__(self) -> int:
        return len(self._entries)


class InMemoryAuthorizationStore:
    """
    Implements AuthorizationStore protocol with a dict keyed by identity.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._entries: dict[str, ResetAuthorization] = {}

    def get(self, identity: str) -> ResetAuthorization | None:
        return self._entries.get(identity)

    def put(self, authorization: ResetAuthorization) -> None:
        self._entries[authorization.identity] = authorization

    def delete(self, identity: str) -> None:
        self._entries.pop(identity, None)

    def consume(self, authorization: ResetAuthorization) -> bool:
        if self._entries.get(authorization.identity) != authorization:
            return False
        del self._entries[authorization.identity]
        return True

    def __len__(self) -> int:
        return len(self._entries)
