"""Startup migrations for the PostgreSQL adapters."""

import logging
from pathlib import Path

from psycopg_pool import ConnectionPool

logger = logging.getLogger(__name__)

# src/adapters/postgres/migrations.py -> <repo>/migrations
MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "migrations"


def run_migrations(pool: ConnectionPool, directory: Path = MIGRATIONS_DIR) -> int:
    """
    Apply every *.sql file in `directory`, in filename order.

    Files must be idempotent (CREATE ... IF NOT EXISTS); all of them run on
    every startup. Each file runs in its own transaction.

    Returns:
        Number of files applied
    """
    scripts = sorted(directory.glob("*.sql")) if directory.is_dir() else []
    if not scripts:
        logger.warning("No SQL migrations found in %s", directory)
        return 0

    for script in scripts:
        try:
            with pool.connection() as conn:
                conn.execute(script.read_text())
        except Exception as exc:
            logger.error("Migration %s failed: %s", script.name, exc)
            raise RuntimeError(f"Database migration failed: {script.name}") from exc
        logger.info("Applied migration %s", script.name)

    return len(scripts)
