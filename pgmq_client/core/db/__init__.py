from pgmq_client.core.db.connection import ConnectionManager
from pgmq_client.core.db.factory import (
    create_connection,
    normalize_connection_params,
    parse_connection_string,
)
from pgmq_client.core.db.health import verify_connection
from pgmq_client.core.db.pool import ConnectionPool

__all__ = [
    "ConnectionManager",
    "ConnectionPool",
    "create_connection",
    "normalize_connection_params",
    "parse_connection_string",
    "verify_connection",
]
