"""
PostgreSQL key-value store adapter - Implements KeyValueStore protocol.

This module provides the PostgreSQL implementation of the domain's
store port using psycopg3 with raw SQL. All namespaces share the
kv_store table, partitioned by its namespace column.

Concurrency Design:
------------------
Each operation is a single statement in its own transaction, so every
operation is atomic for one key. compare_and_put relies on:

1. **UPDATE ... WHERE value = expected**: the row is rewritten only if
   nobody changed it since it was read. rowcount tells the caller which
   case happened.

2. **INSERT ... ON CONFLICT DO NOTHING**: when the caller expects the key
   to be absent, a concurrent insert by another writer wins and this one
   reports False.
"""

import logging
from pathlib import Path

import psycopg
from psycopg_pool import ConnectionPool

from src.domain.exceptions import StorageError
from src.domain.ports import Namespace

logger = logging.getLogger(__name__)

# src/adapters/repository/postgres.py -> <project root>/migrations
MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "migrations"


class PostgresKeyValueStore:
    """
    Implements KeyValueStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize store with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def get(self, namespace: Namespace, key: bytes) -> bytes | None:
        sql = "SELECT value FROM kv_store WHERE namespace = %s AND key = %s"
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (namespace.value, key))
                row = cursor.fetchone()
        except psycopg.Error as e:
            raise StorageError(str(e)) from e
        return bytes(row[0]) if row is not None else None

    def put(self, namespace: Namespace, key: bytes, value: bytes) -> None:
        sql = """
            INSERT INTO kv_store (namespace, key, value)
            VALUES (%s, %s, %s)
            ON CONFLICT (namespace, key) DO UPDATE
            SET value = EXCLUDED.value
        """
        self._execute(sql, (namespace.value, key, value))

    def delete(self, namespace: Namespace, key: bytes) -> None:
        sql = "DELETE FROM kv_store WHERE namespace = %s AND key = %s"
        self._execute(sql, (namespace.value, key))

    def compare_and_put(
        self, namespace: Namespace, key: bytes, expected: bytes | None, value: bytes
    ) -> bool:
        """
        Write value only if the stored value still equals expected.

        Returns:
            True if exactly one row was written, False on conflict
        """
        if expected is None:
            sql = """
                INSERT INTO kv_store (namespace, key, value)
                VALUES (%s, %s, %s)
                ON CONFLICT (namespace, key) DO NOTHING
            """
            params: tuple = (namespace.value, key, value)
        else:
            sql = """
                UPDATE kv_store
                SET value = %s
                WHERE namespace = %s AND key = %s AND value = %s
            """
            params = (value, namespace.value, key, expected)

        return self._execute(sql, params) == 1

    def ping(self) -> None:
        self._execute("SELECT 1", ())

    def _execute(self, sql: str, params: tuple) -> int:
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, params)
                conn.commit()
                return cursor.rowcount
        except psycopg.Error as e:
            logger.error("Database operation failed: %s", e)
            raise StorageError(str(e)) from e


def run_migrations(pool: ConnectionPool, migrations_dir: Path = MIGRATIONS_DIR) -> list[str]:
    """
    Apply every *.sql file in migrations_dir, in filename order.

    Each file runs in its own transaction and must be idempotent, since
    all of them are applied on every startup.

    Returns:
        Names of the files that were applied

    Raises:
        StorageError: If a migration fails; later files are not run
    """
    if not migrations_dir.is_dir():
        logger.warning("No migrations directory at %s", migrations_dir)
        return []

    applied = []
    for sql_file in sorted(migrations_dir.glob("*.sql")):
        try:
            with pool.connection() as conn:
                conn.execute(sql_file.read_text())
        except psycopg.Error as e:
            logger.error("Migration %s failed: %s", sql_file.name, e)
            raise StorageError(f"migration {sql_file.name} failed: {e}") from e
        applied.append(sql_file.name)

    logger.info("Applied %d migration(s) from %s", len(applied), migrations_dir)
    return applied
