"""
Physical connection factory for the PGMQ connection pool.

Connection parameters come in three shapes:
- a connection string ("postgresql://user@host/db" or "host=... dbname=...")
- a mapping of libpq keywords ({"host": "localhost", "dbname": "app"})
- a zero-argument callable returning an already-open connection, for hosts
  that manage their own connections

They are normalized once, when the pool is built, so malformed input fails
at construction rather than on first checkout.
"""
from typing import Any, Callable, Dict, Mapping, Union

import psycopg
from psycopg.conninfo import conninfo_to_dict
from psycopg.rows import dict_row
from psycopg.types.string import TextLoader

from pgmq_client.core.errors import ConfigurationError, ConnectionError, ErrorKind
from pgmq_client.core.logger import setup_logger

logger = setup_logger(__name__, include_location=True)

ConnectionParams = Union[str, Mapping[str, Any], Callable[[], Any]]
NormalizedParams = Union[Dict[str, Any], Callable[[], Any]]


def normalize_connection_params(params: ConnectionParams) -> NormalizedParams:
    """
    Resolve user-supplied connection parameters into a keyword map or a callable.

    Raises:
        ConfigurationError: params are missing, empty, unparseable or of an unsupported type
    """
    if params is None:
        raise ConfigurationError("Connection parameters are required")
    if callable(params):
        return params
    if isinstance(params, str):
        return parse_connection_string(params)
    if isinstance(params, Mapping) and params:
        return dict(params)
    raise ConfigurationError("Invalid connection parameters format")


def parse_connection_string(conn_string: str) -> Dict[str, Any]:
    """Split a URI or key=value connection string into libpq keywords."""
    try:
        parsed = conninfo_to_dict(conn_string)
    except psycopg.Error as e:
        raise ConfigurationError(f"Invalid connection string: {e}") from e
    return {key: value for key, value in parsed.items() if value is not None}


def configure_type_map(conn: psycopg.Connection) -> None:
    """
    One-time result decoding setup for a freshly opened connection.

    Scalars (bigint, timestamptz, boolean) decode to Python types; json and
    jsonb stay raw text so payloads reach the serializer as stored.
    """
    for type_name in ("json", "jsonb"):
        conn.adapters.register_loader(type_name, TextLoader)


def create_connection(params: NormalizedParams) -> Any:
    """
    Open one physical connection.

    Raises:
        ConnectionError: the connect call failed (kind CONNECT_FAILED)
    """
    if callable(params):
        return params()

    kwargs = dict(params)
    conninfo = kwargs.pop("conninfo", "")
    connect_kwargs = {
        "autocommit": True,
        # prepared statements do not survive an in-place session reset
        "prepare_threshold": None,
        "row_factory": dict_row,
    }
    connect_kwargs.update(kwargs)

    target = f"{kwargs.get('host', 'default host')}:{kwargs.get('port', 5432)}/{kwargs.get('dbname', '')}"
    try:
        conn = psycopg.connect(conninfo, **connect_kwargs)
    except psycopg.Error as e:
        logger.error(f"Failed to connect to PostgreSQL at {target}: {e}")
        raise ConnectionError(
            f"Failed to connect to database: {e}", kind=ErrorKind.CONNECT_FAILED
        ) from e

    configure_type_map(conn)
    logger.debug(f"Opened PostgreSQL connection to {target}")
    return conn


__all__ = [
    "ConnectionParams",
    "NormalizedParams",
    "normalize_connection_params",
    "parse_connection_string",
    "configure_type_map",
    "create_connection",
]
