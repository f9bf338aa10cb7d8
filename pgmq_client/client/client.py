from typing import Any, Callable, Dict, Optional, TypeVar

from pgmq_client.client.operations import QueueOperations
from pgmq_client.core.config import DEFAULT_POOL_SIZE, DEFAULT_POOL_TIMEOUT, get_settings
from pgmq_client.core.db.connection import ConnectionManager
from pgmq_client.serializers import JsonSerializer, Serializer
from pgmq_client.transaction import TransactionMixin

T = TypeVar("T")


class Client(TransactionMixin, QueueOperations):
    """
    PGMQ client backed by a pool of PostgreSQL connections.

        with Client("postgresql://postgres@localhost/app", pool_size=10) as client:
            client.create("orders")
            msg_id = client.produce("orders", {"order_id": 42})
            msg = client.read("orders", vt=30)
            client.delete("orders", msg.msg_id)

    Args:
        conn_params: connection string, libpq keyword mapping, zero-argument
            callable returning a connection, or an existing ConnectionManager.
            None reads POSTGRES_* variables from the environment.
        pool_size: maximum pooled connections
        pool_timeout: seconds to wait for a free connection
        auto_reconnect: verify connections before use and retry once when the
            session was lost
        serializer: payload codec for non-string messages (JSON by default)

    Pool arguments left as None come from PGMQ_POOL_SIZE, PGMQ_POOL_TIMEOUT
    and PGMQ_AUTO_RECONNECT when the connection is configured from the
    environment, and from the built-in defaults (5, 5.0, True) otherwise.

    Raises:
        ConfigurationError: no usable connection parameters
    """

    def __init__(
            self,
            conn_params: Any = None,
            pool_size: Optional[int] = None,
            pool_timeout: Optional[float] = None,
            auto_reconnect: Optional[bool] = None,
            serializer: Optional[Serializer] = None,
    ):
        if isinstance(conn_params, ConnectionManager):
            self.connection = conn_params
        else:
            defaults = (DEFAULT_POOL_SIZE, DEFAULT_POOL_TIMEOUT, True)
            if conn_params is None:
                settings = get_settings()
                conn_params = settings.connection_params() or None
                defaults = (settings.pool_size, settings.pool_timeout, settings.auto_reconnect)
            self.connection = ConnectionManager(
                conn_params,
                pool_size=defaults[0] if pool_size is None else pool_size,
                pool_timeout=defaults[1] if pool_timeout is None else pool_timeout,
                auto_reconnect=defaults[2] if auto_reconnect is None else auto_reconnect,
            )
        self.serializer = serializer or JsonSerializer()

    def with_connection(self, fn: Callable[[Any], T]) -> T:
        return self.connection.with_connection(fn)

    def close(self) -> None:
        self.connection.close()

    def stats(self) -> Dict[str, int]:
        return self.connection.stats()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = ["Client"]
