"""
Bounded, lazily-filled pool of physical PostgreSQL connections.

ConnectionPool wraps psycopg_pool.ConnectionPool with min_size=0: connections
are opened on demand up to `size` by the pool's worker threads, handed out to
one caller at a time, and idle ones are closed again after max_idle. Every
connection is opened by the factory ConnectionManager builds from the
connection parameters, so strings, mappings and user callables share one path.

psycopg_pool only tells a waiting caller that it timed out. When a connect
attempt failed while the caller was waiting, checkout() raises the factory's
error instead, so a refused connection is not reported as exhaustion.
"""
import time
from typing import Any, Callable, Dict, Optional

import psycopg_pool
from psycopg_pool import PoolClosed, PoolTimeout

from pgmq_client.core.logger import setup_logger

logger = setup_logger(__name__, include_location=True)


class FactoryConnector:
    """
    Takes the place of the pool's connection_class.

    psycopg_pool opens connections with connection_class.connect(conninfo,
    **kwargs); here connect() ignores both and calls the factory, keeping the
    last failure for checkout() to report.
    """

    def __init__(self, factory: Callable[[], Any]):
        self.factory = factory
        self.last_error: Optional[Exception] = None
        self.failed_at = 0.0

    def connect(self, conninfo: str = "", **kwargs) -> Any:
        try:
            conn = self.factory()
        except Exception as e:
            self.last_error = e
            self.failed_at = time.monotonic()
            raise
        self.last_error = None
        return conn

    def failed_since(self, started: float) -> Optional[Exception]:
        error = self.last_error
        if error is not None and self.failed_at >= started:
            return error
        return None


class ConnectionPool:
    """
    Thread-safe connection pool.

    Args:
        factory: zero-argument callable opening a new physical connection
        size: maximum number of connections in existence at once
        timeout: default seconds checkout() waits for a free connection
        name: label used in log records, worker thread names and errors
    """

    def __init__(self, factory: Callable[[], Any], size: int = 5, timeout: float = 5.0, name: str = "pgmq"):
        if size < 1:
            raise ValueError(f"pool size must be >= 1, got {size}")
        if timeout is None or timeout <= 0:
            raise ValueError(f"pool timeout must be a positive number, got {timeout}")
        self.name = name
        self.size = size
        self.timeout = timeout
        self._connector = FactoryConnector(factory)
        self._pool = psycopg_pool.ConnectionPool(
            connection_class=self._connector,
            min_size=0,
            max_size=size,
            timeout=timeout,
            name=name,
            # a failed connect frees its slot; the next checkout tries again
            reconnect_timeout=0,
            open=True,
        )

    @property
    def closed(self) -> bool:
        return self._pool.closed

    def checkout(self, timeout: Optional[float] = None) -> Any:
        """
        Lease a connection, opening a new one if below capacity.

        Raises:
            PoolTimeout: no connection became available within timeout seconds
            PoolClosed: the pool has been shut down
            Exception: the factory's error, when opening a connection failed
                while waiting
        """
        started = time.monotonic()
        try:
            return self._pool.getconn(timeout)
        except PoolTimeout:
            error = self._connector.failed_since(started)
            if error is None:
                logger.debug(f"Pool '{self.name}' exhausted ({self.size} leased)")
                raise
            logger.error(f"Pool '{self.name}' could not open a connection: {error}")
            raise error

    def checkin(self, conn: Any) -> None:
        """Return a leased connection; after shutdown it is closed instead."""
        try:
            self._pool.putconn(conn)
        except ValueError as e:
            logger.warning(f"Pool '{self.name}' ignoring checkin of a connection it did not lease: {e}")

    def shutdown(self) -> None:
        """
        Close idle connections now and leased ones when they are checked in.

        A second call is a no-op.
        """
        if self._pool.closed:
            return
        pool_stats = self._pool.get_stats()
        idle = pool_stats.get("pool_available", 0)
        logger.info(
            f"Shutting down pool '{self.name}': closing {idle} idle connection(s), "
            f"{pool_stats.get('pool_size', 0) - idle} still leased"
        )
        self._pool.close()

    def stats(self) -> Dict[str, int]:
        """Configured capacity and number of checkouts possible without waiting."""
        if self._pool.closed:
            return {"size": self.size, "available": 0}
        pool_stats = self._pool.get_stats()
        in_use = pool_stats.get("pool_size", 0) - pool_stats.get("pool_available", 0)
        return {"size": self.size, "available": self.size - in_use}


__all__ = ["ConnectionPool", "FactoryConnector", "PoolClosed", "PoolTimeout"]
