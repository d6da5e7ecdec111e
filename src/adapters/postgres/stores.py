"""
PostgreSQL store adapters - Implement ChallengeStore and AuthorizationStore.

Persistent variant of the verification stores: pending challenges and reset
authorizations survive a restart and can be shared by several workers.
Expiry stays lazy - rows keep their timestamps and the workflow decides on
read whether they are still live.

The workflow's locks only cover one process. Across workers, the writes
that decide an outcome are single statements: increment_attempts is an
UPDATE ... RETURNING and both consume() methods are a conditional
DELETE ... RETURNING, so exactly one caller wins each row.

All SQL uses parameterized queries. Each method runs in its own
transaction borrowed from the pool.
"""

from psycopg_pool import ConnectionPool

from src.domain.models import Challenge, Purpose, ResetAuthorization


class PostgresChallengeStore:
    """
    Implements ChallengeStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def get(self, identity: str, purpose: Purpose) -> Challenge | None:
        sql = """
            SELECT code, attempts, created_at
            FROM verification_challenges
            WHERE identity = %s AND purpose = %s
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (identity, purpose.value))
            row = cursor.fetchone()

        if row is None:
            return None
        code, attempts, created_at = row
        return Challenge(
            identity=identity,
            purpose=purpose,
            code=code,
            created_at=created_at,
            attempts=attempts,
        )

    def put(self, challenge: Challenge) -> None:
        """Insert or fully replace the row; a re-issued challenge starts over."""
        sql = """
            INSERT INTO verification_challenges (identity, purpose, code, attempts, created_at)
            VALUES (%s, %s, %s, %s, %s)
            ON CONFLICT (identity, purpose) DO UPDATE
            SET code = EXCLUDED.code,
                attempts = EXCLUDED.attempts,
                created_at = EXCLUDED.created_at
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(
                sql,
                (
                    challenge.identity,
                    challenge.purpose.value,
                    challenge.code,
                    challenge.attempts,
                    challenge.created_at,
                ),
            )
            conn.commit()

    def delete(self, identity: str, purpose: Purpose) -> None:
        sql = "DELETE FROM verification_challenges WHERE identity = %s AND purpose = %s"
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (identity, purpose.value))
            conn.commit()

    def increment_attempts(self, identity: str, purpose: Purpose) -> int | None:
        """Atomic increment in SQL; concurrent writers cannot lose updates."""
        sql = """
            UPDATE verification_challenges
            SET attempts = attempts + 1
            WHERE identity = %s AND purpose = %s
            RETURNING attempts
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (identity, purpose.value))
            row = cursor.fetchone()
            conn.commit()

        return None if row is None else row[0]

    def consume(self, challenge: Challenge) -> bool:
        """
        Delete the row only if it still holds this code and issue time.

        The row lock taken by DELETE makes concurrent callers queue; the
        losers re-check the predicate and match nothing.
        """
        sql = """
            DELETE FROM verification_challenges
            WHERE identity = %s AND purpose = %s AND code = %s AND created_at = %s
            RETURNING identity
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(
                sql,
                (
                    challenge.identity,
                    challenge.purpose.value,
                    challenge.code,
                    challenge.created_at,
                ),
            )
            row = cursor.fetchone()
            conn.commit()

        return row is not None


class PostgresAuthorizationStore:
    """
    Implements AuthorizationStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def get(self, identity: str) -> ResetAuthorization | None:
        sql = "SELECT issued_at, expires_at FROM reset_authorizations WHERE identity = %s"
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (identity,))
            row = cursor.fetchone()

        if row is None:
            return None
        return ResetAuthorization(identity=identity, issued_at=row[0], expires_at=row[1])

    def put(self, authorization: ResetAuthorization) -> None:
        sql = """
            INSERT INTO reset_authorizations (identity, issued_at, expires_at)
            VALUES (%s, %s, %s)
            ON CONFLICT (identity) DO UPDATE
            SET issued_at = EXCLUDED.issued_at,
                expires_at = EXCLUDED.expires_at
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(
                sql,
                (authorization.identity, authorization.issued_at, authorization.expires_at),
            )
            conn.commit()

    def delete(self, identity: str) -> None:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("DELETE FROM reset_authorizations WHERE identity = %s", (identity,))
            conn.commit()

    def consume(self, authorization: ResetAuthorization) -> bool:
        """Single-use delete: True only for the caller whose DELETE removed the row."""
        sql = """
            DELETE FROM reset_authorizations
            WHERE identity = %s AND issued_at = %s AND expires_at = %s
            RETURNING identity
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(
                sql,
                (authorization.identity, authorization.issued_at, authorization.expires_at),
            )
            row = cursor.fetchone()
            conn.commit()

        return row is not None
