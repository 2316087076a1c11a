# ============================================================================
# POSTGRESQL CONNECTION INFRASTRUCTURE
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Infrastructure - PostgreSQL connection handling
# PURPOSE: Database connectivity for catalog inspection and DDL execution
# CREATED: 19 OCT 2026
# ============================================================================
"""
PostgreSQL Connection Infrastructure

Connection string resolution, in order:
1. Explicit connection string passed to PostgreSQLRepository
2. DATABASE_URL
3. POSTGRES_HOST / POSTGRES_PORT / POSTGRES_DB / POSTGRES_USER /
   POSTGRES_PASSWORD / POSTGRES_SSLMODE

Every call opens its own short-lived connection. Callers that need several
statements in one transaction use get_connection() or
execute_in_transaction().
"""

import os
import logging
import threading
from typing import Any, Dict, List, Optional, Sequence
from contextlib import contextmanager

import psycopg
from psycopg.rows import dict_row

logger = logging.getLogger(__name__)


def build_connection_string() -> str:
    """
    Raises:
        ValueError: Neither DATABASE_URL nor POSTGRES_HOST + POSTGRES_DB set
    """
    url = os.environ.get("DATABASE_URL")
    if url:
        return url

    host = os.environ.get("POSTGRES_HOST")
    database = os.environ.get("POSTGRES_DB")
    if not (host and database):
        raise ValueError(
            "Database connection not configured. "
            "Set DATABASE_URL or POSTGRES_HOST and POSTGRES_DB environment variables."
        )

    user = os.environ.get("POSTGRES_USER", "postgres")
    password = os.environ.get("POSTGRES_PASSWORD", "")
    port = os.environ.get("POSTGRES_PORT", "5432")
    sslmode = os.environ.get("POSTGRES_SSLMODE", "prefer")
    return f"postgresql://{user}:{password}@{host}:{port}/{database}?sslmode={sslmode}"


class PostgreSQLRepository:
    """
    Thin synchronous wrapper over psycopg returning dict rows.

    Usage:
        repo = PostgreSQLRepository()
        row = repo.fetch_one("SELECT current_database() AS db")
    """

    def __init__(self, connection_string: Optional[str] = None):
        self._conn_string = connection_string
        self._lock = threading.Lock()

    @property
    def conn_string(self) -> str:
        if self._conn_string is None:
            with self._lock:
                if self._conn_string is None:
                    self._conn_string = build_connection_string()
        return self._conn_string

    @contextmanager
    def get_connection(self):
        """Yield a dict_row connection; rolled back on error, always closed."""
        conn = psycopg.connect(self.conn_string, row_factory=dict_row)
        try:
            yield conn
        except psycopg.Error as e:
            logger.error(f"PostgreSQL error: {e}")
            conn.rollback()
            raise
        finally:
            conn.close()

    def _run(self, query, params, fetch: Optional[str] = None):
        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                result = getattr(cur, fetch)() if fetch else None
            conn.commit()
        return result

    def execute(self, query, params: tuple = None) -> None:
        self._run(query, params)

    def fetch_one(self, query, params: tuple = None) -> Optional[Dict[str, Any]]:
        return self._run(query, params, "fetchone")

    def fetch_all(self, query, params: tuple = None) -> List[Dict[str, Any]]:
        return self._run(query, params, "fetchall")

    def execute_in_transaction(self, statements: Sequence) -> int:
        """
        Run statements in one transaction; any failure rolls back all of them.

        Returns:
            Number of statements executed
        """
        with self.get_connection() as conn:
            with conn.transaction(), conn.cursor() as cur:
                for stmt in statements:
                    logger.debug(f"Executing: {stmt.as_string(conn) if hasattr(stmt, 'as_string') else stmt}")
                    cur.execute(stmt)
        return len(statements)


_default_repo: Optional[PostgreSQLRepository] = None
_default_lock = threading.Lock()


def get_postgres_repository() -> PostgreSQLRepository:
    """Process-wide repository built from the environment."""
    global _default_repo
    if _default_repo is None:
        with _default_lock:
            if _default_repo is None:
                _default_repo = PostgreSQLRepository()
    return _default_repo


__all__ = [
    "PostgreSQLRepository",
    "build_connection_string",
    "get_postgres_repository",
]
