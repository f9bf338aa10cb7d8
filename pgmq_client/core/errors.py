"""
Exception hierarchy and error classification for the PGMQ client.

Every runtime failure that touches the pool or a physical connection is
surfaced as ConnectionError; the attached ErrorKind lets callers tell a
saturated pool from a closed one, a failed connect from a lost session:

    try:
        client.produce("orders", payload)
    except ConnectionError as e:
        if e.kind == ErrorKind.POOL_TIMEOUT:
            ...  # capacity problem
        elif e.kind == ErrorKind.CONNECT_FAILED:
            ...  # outage or misconfiguration
"""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field


class ErrorKind(str, Enum):
    """Failure categories carried by ConnectionError."""

    POOL_TIMEOUT = "pool_timeout"         # No connection became available in time
    POOL_CLOSED = "pool_closed"           # Checkout after shutdown
    CONNECT_FAILED = "connect_failed"     # Low-level connect call failed
    CONNECTION_LOST = "connection_lost"   # Session severed mid-operation
    DATABASE = "database"                 # Any other database-level failure
    TRANSACTION = "transaction"           # Failure inside a transaction block


# Substrings (lowercase) of error messages raised when the session behind a
# connection is gone. libpq wording first, then the psycopg phrasings.
CONNECTION_LOST_MESSAGES = (
    "server closed the connection",
    "connection not open",
    "no connection to the server",
    "terminating connection",
    "connection to server was lost",
    "could not receive data from server",
    "the connection is closed",
    "the connection is lost",
)


class ErrorInfo(BaseModel):
    """Structured description of a classified database error."""

    kind: ErrorKind = Field(
        default=ErrorKind.DATABASE,
        description="Error category"
    )
    retryable: bool = Field(
        default=False,
        description="Whether a single reconnect retry is worth attempting"
    )
    code: str = Field(
        default="PG_UNKNOWN",
        description="PG_<sqlstate> when the server reported one"
    )
    message: str = Field(
        default="Unknown error",
        description="Original error message"
    )
    pg_code: Optional[str] = Field(
        None, description="PostgreSQL SQLSTATE (e.g., 08006, 57P01)"
    )
    exception_type: Optional[str] = Field(
        None, description="Python exception class name"
    )

    def to_dict(self) -> dict[str, Any]:
        d = {
            "kind": self.kind.value,
            "retryable": self.retryable,
            "code": self.code,
            "message": self.message,
        }
        if self.pg_code is not None:
            d["pg_code"] = self.pg_code
        if self.exception_type is not None:
            d["exception_type"] = self.exception_type
        return d


class PGMQError(Exception):
    """Base class for all client errors."""


class ConnectionError(PGMQError):
    """Raised when the pool or a database connection fails."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.DATABASE,
        info: Optional[ErrorInfo] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.info = info


class QueueNotFoundError(PGMQError):
    """Raised when an operation targets a queue that does not exist."""


class MessageNotFoundError(PGMQError):
    """Raised when a message cannot be found."""


class SerializationError(PGMQError):
    """Raised when a message payload cannot be serialized."""


class DeserializationError(PGMQError):
    """Raised when a message payload cannot be deserialized."""


class ConfigurationError(PGMQError):
    """Raised when connection parameters are missing or malformed."""


class InvalidQueueNameError(PGMQError):
    """Raised when a queue name violates PGMQ naming rules."""


def is_connection_lost_error(error: BaseException) -> bool:
    """True when the error text says the underlying session is gone."""
    message = str(error).lower()
    return any(marker in message for marker in CONNECTION_LOST_MESSAGES)


def classify_postgres_error(error: BaseException) -> ErrorInfo:
    """Classify a psycopg error into ErrorInfo."""
    pg_code = getattr(error, "sqlstate", None)
    code = f"PG_{pg_code}" if pg_code else "PG_UNKNOWN"

    if is_connection_lost_error(error):
        return ErrorInfo(
            kind=ErrorKind.CONNECTION_LOST,
            retryable=True,
            code=code,
            message=str(error),
            pg_code=pg_code,
            exception_type=type(error).__name__,
        )

    return ErrorInfo(
        kind=ErrorKind.DATABASE,
        retryable=False,
        code=code,
        message=str(error),
        pg_code=pg_code,
        exception_type=type(error).__name__,
    )


__all__ = [
    "CONNECTION_LOST_MESSAGES",
    "ErrorKind",
    "ErrorInfo",
    "PGMQError",
    "ConnectionError",
    "QueueNotFoundError",
    "MessageNotFoundError",
    "SerializationError",
    "DeserializationError",
    "ConfigurationError",
    "InvalidQueueNameError",
    "is_connection_lost_error",
    "classify_postgres_error",
]
