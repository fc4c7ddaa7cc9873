"""
db/connection.py
----------------
Manages the PostgreSQL connection pool.
Uses psycopg2's ThreadedConnectionPool so concurrent requests can share it,
bounded by a semaphore so callers wait (up to a timeout) for a free
connection instead of failing as soon as the pool is exhausted.
"""

import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator

import psycopg2
from psycopg2 import pool
from psycopg2.extensions import connection as PgConnection

from config import (
    DB_CHECKOUT_TIMEOUT_SECONDS,
    DB_CONN_MAX_LIFETIME_SECONDS,
    DB_MAX_CONNECTIONS,
    DB_MIN_IDLE_CONNECTIONS,
    REQUEST_TIMEOUT_SECONDS,
)
from errors import DatabaseConnectionError
from utils.logger import get_logger

logger = get_logger(__name__)


class AgingConnectionPool(pool.ThreadedConnectionPool):
    """ThreadedConnectionPool that remembers when each connection was opened."""

    def __init__(self, minconn: int, maxconn: int, *args, clock: Callable[[], float] = time.monotonic, **kwargs):
        # Set before the parent opens the first `minconn` connections.
        self.clock = clock
        self.opened_at: dict[PgConnection, float] = {}
        super().__init__(minconn, maxconn, *args, **kwargs)

    def _connect(self, key=None):
        conn = super()._connect(key)
        self.opened_at[conn] = self.clock()
        return conn

    def putconn(self, conn=None, key=None, close=False):
        # The parent closes surplus idle connections itself; forget those too.
        with self._lock:
            self._putconn(conn, key, close)
            for closed in [c for c in self.opened_at if c.closed]:
                del self.opened_at[closed]

    def closeall(self):
        with self._lock:
            self._closeall()
            self.opened_at.clear()

    def age(self, conn: PgConnection) -> float:
        """Seconds since `conn` was opened."""
        with self._lock:
            opened = self.opened_at.get(conn)
        now = self.clock()
        return 0.0 if opened is None else now - opened

    def tracked(self) -> int:
        """Number of open connections the pool still knows about."""
        with self._lock:
            return len(self.opened_at)


class ConnectionPool:
    """
    Process-wide pool of PostgreSQL connections.

    Attributes:
        max_connections: Ceiling on simultaneously open connections.
        min_idle: Connections opened eagerly and kept ready.
        max_lifetime: Seconds after which a connection is closed and replaced.
        checkout_timeout: Seconds to wait for a free connection.

    Expired connections are retired on checkout and on return.
    """

    def __init__(
        self,
        database_url: str,
        min_idle: int = DB_MIN_IDLE_CONNECTIONS,
        max_connections: int = DB_MAX_CONNECTIONS,
        max_lifetime: float = DB_CONN_MAX_LIFETIME_SECONDS,
        statement_timeout_seconds: int = REQUEST_TIMEOUT_SECONDS,
        checkout_timeout: float = DB_CHECKOUT_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Open the pool.

        Raises:
            psycopg2.OperationalError: If the database is unreachable.
        """
        self.max_connections = max_connections
        self.min_idle = min_idle
        self.max_lifetime = max_lifetime
        self.checkout_timeout = checkout_timeout
        self._slots = threading.BoundedSemaphore(max_connections)
        self._lock = threading.Lock()
        self._in_use = 0
        self._closed = False
        # The server cancels any statement still running when the request times out.
        self._pool = AgingConnectionPool(
            min_idle,
            max_connections,
            database_url,
            options=f"-c statement_timeout={statement_timeout_seconds * 1000}",
            clock=clock,
        )

    # ── CHECKOUT ──────────────────────────────────────────

    def _expired(self, conn: PgConnection) -> bool:
        return self._pool.age(conn) >= self.max_lifetime

    def _acquire(self) -> PgConnection:
        if not self._slots.acquire(timeout=self.checkout_timeout):
            raise pool.PoolError(
                f"No database connection became free within {self.checkout_timeout}s"
            )
        try:
            conn = self._pool.getconn()
            while conn.closed or self._expired(conn):
                logger.debug("Retiring expired database connection.")
                self._pool.putconn(conn, close=True)
                conn = self._pool.getconn()
        except BaseException:
            self._slots.release()
            raise
        with self._lock:
            self._in_use += 1
        return conn

    def _release(self, conn: PgConnection, discard: bool = False) -> None:
        try:
            self._pool.putconn(conn, close=discard or conn.closed or self._expired(conn))
        finally:
            with self._lock:
                self._in_use -= 1
            self._slots.release()

    @contextmanager
    def connection(self) -> Iterator[PgConnection]:
        """
        Borrow a connection for the duration of a `with` block.

        Commits when the block exits cleanly, rolls back when it raises,
        and always hands the connection back to the pool.

        Raises:
            psycopg2.pool.PoolError: If no connection frees up within
                `checkout_timeout` seconds.
        """
        conn = self._acquire()
        broken = False
        try:
            yield conn
            conn.commit()
        except Exception:
            try:
                conn.rollback()
            except psycopg2.Error as e:
                logger.warning(f"Rollback failed, discarding connection: {e}")
                broken = True
            raise
        finally:
            self._release(conn, discard=broken)

    # ── MONITORING ────────────────────────────────────────

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            with self.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute("SELECT 1;")
                    cur.fetchone()
            return True
        except psycopg2.Error as e:
            logger.error(f"Database ping failed: {e}")
            return False

    def status(self) -> dict:
        """Snapshot of the pool limits and current usage."""
        with self._lock:
            in_use = self._in_use
        return {
            "max_connections": self.max_connections,
            "min_idle": self.min_idle,
            "in_use": in_use,
            "open": self._pool.tracked(),
        }

    # ── SHUTDOWN ──────────────────────────────────────────

    def close(self) -> None:
        """Close all connections in the pool. Safe to call twice."""
        if self._closed:
            return
        self._pool.closeall()
        self._closed = True
        logger.info("Database connection pool closed.")


def init_pool(database_url: str) -> ConnectionPool | None:
    """
    Initialize the database connection pool.

    Args:
        database_url: PostgreSQL DSN. Empty means degraded mode.

    Returns:
        The pool, or None when no database is configured.

    Raises:
        DatabaseConnectionError: If the database is unreachable or
            rejects the credentials.
    """
    if not database_url:
        logger.warning("DATABASE_URL is not set; running without a database (degraded mode).")
        return None

    logger.info("Connecting to database...")
    try:
        db_pool = ConnectionPool(database_url)
    except psycopg2.Error as e:
        logger.error(f"Failed to initialize database pool: {e}")
        raise DatabaseConnectionError(f"Failed to connect to database: {e}") from e

    logger.info(
        f"Database connection pool initialized "
        f"(max={db_pool.max_connections}, idle={db_pool.min_idle}, "
        f"lifetime={db_pool.max_lifetime}s)."
    )
    return db_pool
