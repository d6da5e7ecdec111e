"""PostgreSQL adapters - psycopg3 implementations of the persistence ports."""

from .accounts import PostgresAccountDirectory
from .migrations import run_migrations
from .stores import PostgresAuthorizationStore, PostgresChallengeStore

__all__ = [
    "PostgresAccountDirectory",
    "PostgresAuthorizationStore",
    "PostgresChallengeStore",
    "run_migrations",
]
