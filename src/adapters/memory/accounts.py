"""
In-memory account directory - Implements AccountDirectory protocol.

Used when ACCOUNT_DIRECTORY_BACKEND=memory and by the test suite.
"""

import threading
import uuid

from src.domain.models import Account


class InMemoryAccountDirectory:
    """
    Implements AccountDirectory protocol with a dict keyed by email.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}
        self._lock = threading.Lock()

    def add(self, email: str, password_hash: str) -> Account:
        """Create an account for a normalized email address."""
        account = Account(id=uuid.uuid4().hex, email=email, password_hash=password_hash)
        with self._lock:
            self._accounts[email] = account
        return account

    def find_by_identity(self, identity: str) -> Account | None:
        with self._lock:
            return self._accounts.get(identity)

    def update_credential(self, account_id: str, hashed_credential: str) -> None:
        with self._lock:
            for email, account in self._accounts.items():
                if account.id == account_id:
                    self._accounts[email] = Account(
                        id=account.id, email=account.email, password_hash=hashed_credential
                    )
                    return
