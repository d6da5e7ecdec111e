"""
PostgreSQL account directory - Implements AccountDirectory protocol.

Reads and updates the accounts table owned by the wider marketplace
backend. Only email lookup and password replacement are exposed.
"""

import logging

from psycopg_pool import ConnectionPool

from src.domain.models import Account

logger = logging.getLogger(__name__)


class PostgresAccountDirectory:
    """
    Implements AccountDirectory protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize directory with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def find_by_identity(self, identity: str) -> Account | None:
        sql = "SELECT id, email, password_hash FROM accounts WHERE email = %s"
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (identity,))
            row = cursor.fetchone()

        if row is None:
            return None
        return Account(id=str(row[0]), email=row[1], password_hash=row[2])

    def update_credential(self, account_id: str, hashed_credential: str) -> None:
        sql = """
            UPDATE accounts
            SET password_hash = %s, updated_at = NOW()
            WHERE id = %s::uuid
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (hashed_credential, account_id))
            conn.commit()
            if cursor.rowcount != 1:
                logger.warning(
                    "Credential update matched %d rows for account %s",
                    cursor.rowcount,
                    account_id,
                )
