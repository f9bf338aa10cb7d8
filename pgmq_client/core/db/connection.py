"""
Connection manager: pool ownership, health verification and reconnect retry.

    manager = ConnectionManager("postgresql://postgres@localhost/app", pool_size=5)
    rows = manager.with_connection(lambda conn: conn.execute("SELECT 1").fetchall())
    manager.close()

with_connection() retries the whole checkout -> verify -> fn sequence once
when the failure looks like a severed session and auto_reconnect is on.
Every other database failure is wrapped in ConnectionError straight away.

The closed-flag check runs under the lease rather than as the pool's check
hook, so a failed session reset reaches with_connection() as a psycopg error.
"""
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, TypeVar

import psycopg

from pgmq_client.core.config import DEFAULT_POOL_SIZE, DEFAULT_POOL_TIMEOUT
from pgmq_client.core.db.factory import (
    ConnectionParams,
    create_connection,
    normalize_connection_params,
)
from pgmq_client.core.db.health import verify_connection
from pgmq_client.core.db.pool import ConnectionPool, PoolClosed, PoolTimeout
from pgmq_client.core.errors import (
    ConnectionError,
    ErrorKind,
    classify_postgres_error,
)
from pgmq_client.core.logger import LoggingContext, setup_logger

logger = setup_logger(__name__, include_location=True)

T = TypeVar("T")


class ConnectionManager:
    """
    Owns the connection pool for one client.

    Args:
        conn_params: connection string, libpq keyword mapping, or a
            zero-argument callable returning a connection
        pool_size: maximum number of pooled connections
        pool_timeout: seconds to wait for a free connection
        auto_reconnect: verify connections before use and retry once on a
            lost connection

    Raises:
        ConfigurationError: conn_params is missing or malformed
    """

    def __init__(
            self,
            conn_params: ConnectionParams,
            pool_size: int = DEFAULT_POOL_SIZE,
            pool_timeout: float = DEFAULT_POOL_TIMEOUT,
            auto_reconnect: bool = True,
    ):
        self._conn_params = normalize_connection_params(conn_params)
        self.pool_size = pool_size
        self.pool_timeout = pool_timeout
        self.auto_reconnect = auto_reconnect
        self.pool = self._create_pool()

    def _create_pool(self) -> ConnectionPool:
        params = self._conn_params
        pool = ConnectionPool(
            lambda: create_connection(params),
            size=self.pool_size,
            timeout=self.pool_timeout,
        )
        logger.info(
            f"Created PGMQ connection pool | Config: size={self.pool_size}, "
            f"timeout={self.pool_timeout}s, auto_reconnect={self.auto_reconnect}"
        )
        return pool

    @contextmanager
    def lease(self) -> Iterator[Any]:
        """
        Hold one pooled connection for the duration of the block.

        The connection is health-checked first when auto_reconnect is on and
        is always returned to the pool on exit.

        Raises:
            ConnectionError: pool timeout (POOL_TIMEOUT), pool shut down (POOL_CLOSED),
                or a new connection could not be opened (CONNECT_FAILED)
        """
        try:
            conn = self.pool.checkout()
        except PoolTimeout as e:
            logger.error(f"Connection pool timeout after {self.pool_timeout}s ({self.pool_size} connections leased)")
            raise ConnectionError(f"Connection pool timeout: {e}", kind=ErrorKind.POOL_TIMEOUT) from e
        except PoolClosed as e:
            raise ConnectionError(f"Connection pool is closed: {e}", kind=ErrorKind.POOL_CLOSED) from e

        try:
            if self.auto_reconnect:
                verify_connection(conn)
            yield conn
        finally:
            self.pool.checkin(conn)

    def with_connection(self, fn: Callable[[Any], T]) -> T:
        """
        Run fn against a leased, verified connection and return its result.

        Raises:
            ConnectionError: pool failure, or a database error (after the single
                retry when the session was lost)
        """
        retries = 1 if self.auto_reconnect else 0
        attempts = 0

        while True:
            try:
                with self.lease() as conn:
                    return fn(conn)
            except psycopg.Error as e:
                attempts += 1
                info = classify_postgres_error(e)

                with LoggingContext(pool=self.pool.name, attempt=attempts):
                    if attempts <= retries and info.retryable:
                        logger.warning(f"Database connection lost, retrying once on a fresh checkout: {e}")
                        continue
                    if info.kind == ErrorKind.CONNECTION_LOST:
                        logger.error(f"Database connection lost after {attempts} attempt(s): {e}")
                raise ConnectionError(
                    f"Database connection error: {e}", kind=info.kind, info=info
                ) from e

    def close(self) -> None:
        """Shut the pool down; safe to call more than once."""
        self.pool.shutdown()

    def stats(self) -> Dict[str, int]:
        """
        Pool statistics.

            manager.stats()  # {'size': 5, 'available': 3}
        """
        return self.pool.stats()


__all__ = ["ConnectionManager"]
