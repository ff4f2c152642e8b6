"""
db/connection.py
----------------
Manages the PostgreSQL connection pool.
Wraps psycopg2's ThreadedConnectionPool with a slot counter so callers
either queue for a free connection or fail fast, depending on configuration.
"""

import threading
from contextlib import contextmanager

import psycopg2
from psycopg2 import pool

from config import (
    DATABASE_URL,
    DB_MAX_CONNECTIONS,
    DB_MIN_CONNECTIONS,
    DB_QUEUE_UNBOUNDED,
)
from errors import PoolClosed, PoolExhausted
from utils.logger import get_logger

logger = get_logger(__name__)


class ReusingConnectionPool(pool.ThreadedConnectionPool):
    """
    ThreadedConnectionPool that keeps every returned connection idle for
    reuse, up to ``maxconn``. The stock pool closes anything above ``minconn``.
    """

    def _putconn(self, conn, key=None, close=False):
        # putconn() holds self._lock around this call.
        minconn = self.minconn
        self.minconn = self.maxconn
        try:
            super()._putconn(conn, key, close)
        finally:
            self.minconn = minconn


class ConnectionPool:
    """
    Bounded lessor of PostgreSQL connections.

    Each connection handed out by :meth:`acquire` belongs to a single caller
    until it comes back through :meth:`release`. Connections are reused,
    never closed on release.
    """

    def __init__(
        self,
        dsn: str,
        min_connections: int = 0,
        max_connections: int = 10,
        queue_unbounded: bool = True,
    ) -> None:
        """
        Open the pool.

        Args:
            dsn: libpq connection string or URL.
            min_connections: Connections opened eagerly.
            max_connections: Upper bound on simultaneously leased connections.
            queue_unbounded: Wait for a free connection when the bound is
                reached (True) or raise PoolExhausted right away (False).

        Raises:
            psycopg2.OperationalError: If eager connections cannot be opened.
        """
        self.max_connections = max_connections
        self.queue_unbounded = queue_unbounded
        self._slots = threading.BoundedSemaphore(max_connections)
        self._closed = False
        try:
            self._pool = ReusingConnectionPool(min_connections, max_connections, dsn)
            logger.info(
                f"Database connection pool initialized "
                f"(max={max_connections}, queue_unbounded={queue_unbounded})."
            )
        except psycopg2.OperationalError as e:
            logger.error(f"Failed to initialize database pool: {e}")
            raise

    @classmethod
    def from_config(cls) -> "ConnectionPool":
        """Build a pool from the DB_* settings in config.py."""
        return cls(
            DATABASE_URL,
            min_connections=DB_MIN_CONNECTIONS,
            max_connections=DB_MAX_CONNECTIONS,
            queue_unbounded=DB_QUEUE_UNBOUNDED,
        )

    def acquire(self):
        """
        Lease a connection from the pool.

        Returns:
            A psycopg2 connection object.

        Raises:
            PoolClosed: If the pool has been closed.
            PoolExhausted: If all connections are leased and queueing is off.
            psycopg2.OperationalError: If the database is unreachable.
        """
        if self._closed:
            raise PoolClosed("Connection pool is closed.")
        if not self._slots.acquire(blocking=self.queue_unbounded):
            raise PoolExhausted(
                f"Connection pool exhausted ({self.max_connections} connections in use)."
            )
        try:
            return self._pool.getconn()
        except pool.PoolError as e:
            self._slots.release()
            raise PoolClosed(str(e)) from e
        except Exception:
            self._slots.release()
            raise

    def release(self, conn) -> None:
        """
        Return a connection back to the pool.

        Args:
            conn: The psycopg2 connection to release.
        """
        try:
            if not self._closed:
                self._pool.putconn(conn)
        finally:
            self._slots.release()

    @contextmanager
    def connection(self):
        """Lease a connection for the duration of a ``with`` block."""
        conn = self.acquire()
        try:
            yield conn
        finally:
            self.release(conn)

    def close(self) -> None:
        """Close all connections in the pool."""
        if self._closed:
            return
        self._closed = True
        self._pool.closeall()
        logger.info("Database connection pool closed.")
