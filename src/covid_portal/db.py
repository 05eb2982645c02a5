import sqlite3
import threading
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence

import psycopg2
import psycopg2.extras
from fastapi import Request
from loguru import logger
from psycopg2.pool import ThreadedConnectionPool

from covid_portal import config

# Binding an int outside the 64-bit INTEGER range raises OverflowError, not sqlite3.Error
_SQLITE_ERRORS = (sqlite3.Error, OverflowError)


class StoreError(Exception):
    """Raised when the underlying database driver fails a statement."""


class Store:
    """
    Relational store used by the request handlers.

    Queries are written with ``%s`` placeholders; each backend adapts them to
    its driver's parameter style. Every driver error is re-raised as
    ``StoreError`` so handlers see one failure type regardless of backend.
    """

    def fetch_one(self, query: str, params: Optional[Sequence[Any]] = None) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def fetch_all(self, query: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def execute(self, query: str, params: Optional[Sequence[Any]] = None) -> int:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


class SqliteStore(Store):
    """A single shared SQLite connection; statements run one at a time."""

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(path, check_same_thread=False)
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open SQLite database '{path}': {e}") from e
        self._conn.row_factory = sqlite3.Row

    @staticmethod
    def _adapt(query: str) -> str:
        return query.replace("%s", "?")

    # PUBLIC_INTERFACE
    def fetch_one(self, query: str, params: Optional[Sequence[Any]] = None) -> Optional[Dict[str, Any]]:
        """Fetch a single row as a dict, or None."""
        with self._lock:
            try:
                row = self._conn.execute(self._adapt(query), list(params or [])).fetchone()
            except _SQLITE_ERRORS as e:
                raise StoreError(str(e)) from e
        return dict(row) if row else None

    # PUBLIC_INTERFACE
    def fetch_all(self, query: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """Fetch all rows as dicts."""
        with self._lock:
            try:
                rows = self._conn.execute(self._adapt(query), list(params or [])).fetchall()
            except _SQLITE_ERRORS as e:
                raise StoreError(str(e)) from e
        return [dict(r) for r in rows]

    # PUBLIC_INTERFACE
    def execute(self, query: str, params: Optional[Sequence[Any]] = None) -> int:
        """Execute a statement (INSERT/UPDATE/DELETE). Returns affected rowcount."""
        with self._lock:
            try:
                cur = self._conn.execute(self._adapt(query), list(params or []))
                self._conn.commit()
            except _SQLITE_ERRORS as e:
                self._conn.rollback()
                raise StoreError(str(e)) from e
            return cur.rowcount

    # PUBLIC_INTERFACE
    def executescript(self, script: str) -> None:
        """Run a multi-statement SQL script (schema setup, seed data)."""
        with self._lock:
            try:
                self._conn.executescript(script)
            except sqlite3.Error as e:
                raise StoreError(str(e)) from e

    def close(self) -> None:
        with self._lock:
            self._conn.close()


class PostgresStore(Store):
    """PostgreSQL access through a psycopg2 thread-safe connection pool."""

    def __init__(self, dsn: str, minconn: int = 1, maxconn: int = 10):
        try:
            self._pool = ThreadedConnectionPool(minconn=minconn, maxconn=maxconn, dsn=dsn)
        except psycopg2.Error as e:
            raise StoreError(f"Cannot connect to PostgreSQL: {e}") from e

    @contextmanager
    def _get_conn(self):
        try:
            conn = self._pool.getconn()
        except psycopg2.Error as e:
            raise StoreError(f"Cannot get a connection from the pool: {e}") from e
        try:
            yield conn
        except psycopg2.Error as e:
            try:
                conn.rollback()
            except psycopg2.Error:
                logger.warning("Rollback failed on a broken connection")
            raise StoreError(str(e)) from e
        finally:
            self._pool.putconn(conn)

    @staticmethod
    def _dict_cursor(conn):
        return conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor)

    # PUBLIC_INTERFACE
    def fetch_one(self, query: str, params: Optional[Sequence[Any]] = None) -> Optional[Dict[str, Any]]:
        """Fetch a single row as a dict, or None."""
        with self._get_conn() as conn:
            with self._dict_cursor(conn) as cur:
                cur.execute(query, params or [])
                row = cur.fetchone()
                return dict(row) if row else None

    # PUBLIC_INTERFACE
    def fetch_all(self, query: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """Fetch all rows as dicts."""
        with self._get_conn() as conn:
            with self._dict_cursor(conn) as cur:
                cur.execute(query, params or [])
                return [dict(r) for r in cur.fetchall()]

    # PUBLIC_INTERFACE
    def execute(self, query: str, params: Optional[Sequence[Any]] = None) -> int:
        """Execute a statement (INSERT/UPDATE/DELETE). Returns affected rowcount."""
        with self._get_conn() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params or [])
                affected = cur.rowcount
                conn.commit()
                return affected

    def close(self) -> None:
        self._pool.closeall()


# PUBLIC_INTERFACE
def create_store() -> Store:
    """Open the store selected by the environment (SQLITE_PATH wins over PostgreSQL)."""
    path = config.sqlite_path()
    if path:
        logger.info("Opening SQLite store at {}", path)
        return SqliteStore(path)

    minconn, maxconn = config.pool_bounds()
    logger.info("Opening PostgreSQL store (pool {}-{})", minconn, maxconn)
    return PostgresStore(config.postgres_dsn(), minconn=minconn, maxconn=maxconn)


# PUBLIC_INTERFACE
def get_store(request: Request) -> Store:
    """Dependency returning the store opened at application startup."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise StoreError("Store is not initialized")
    return store
