"""
Shared plumbing for the queue-operation mixins.

Mixins only depend on ConnectionProvider: something with a serializer, a
with_connection(fn) hook and a transaction(fn) hook. Client routes
with_connection through the pool; TransactionalClient runs fn on the
connection held by the enclosing transaction.
"""
import json
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence, TypeVar

from psycopg.rows import dict_row

from pgmq_client.core.errors import InvalidQueueNameError, SerializationError
from pgmq_client.serializers import Serializer

T = TypeVar("T")

DEFAULT_VT = 30
MAX_QUEUE_NAME_LENGTH = 48
MAX_MULTI_QUEUES = 50

_QUEUE_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


class ConnectionProvider(Protocol):
    connection: Any
    serializer: Serializer

    def with_connection(self, fn: Callable[[Any], T]) -> T:
        ...

    def transaction(self, fn: Callable[[Any], T]) -> T:
        ...


def validate_queue_name(queue_name: Any) -> None:
    """
    Check a queue name against PGMQ naming rules.

    Raises:
        InvalidQueueNameError: empty, 48 characters or longer, or containing
            anything but letters, digits and underscores
    """
    if queue_name is None or not str(queue_name).strip():
        raise InvalidQueueNameError("Queue name cannot be empty")

    name = str(queue_name)
    if len(name) >= MAX_QUEUE_NAME_LENGTH:
        raise InvalidQueueNameError(
            f"Queue name '{name}' exceeds maximum length of {MAX_QUEUE_NAME_LENGTH} characters "
            f"(current length: {len(name)})"
        )

    if not _QUEUE_NAME_RE.match(name):
        raise InvalidQueueNameError(
            f"Invalid queue name '{name}': must start with a letter or underscore "
            "and contain only letters, digits, and underscores"
        )


def validate_queue_list(queue_names: Any) -> None:
    if not isinstance(queue_names, list):
        raise TypeError("queue_names must be a list")
    if not queue_names:
        raise ValueError("queue_names cannot be empty")
    if len(queue_names) > MAX_MULTI_QUEUES:
        raise ValueError(f"queue_names cannot exceed {MAX_MULTI_QUEUES} queues")
    for queue_name in queue_names:
        validate_queue_name(queue_name)


def validate_queue_mapping(mapping: Any, label: str) -> None:
    if not isinstance(mapping, Mapping):
        raise TypeError(f"{label} must be a mapping of queue name to message ids")
    for queue_name in mapping:
        validate_queue_name(queue_name)


def run_query(conn: Any, query: Any, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
    with conn.cursor(row_factory=dict_row) as cur:
        cur.execute(query, params)
        return cur.fetchall()


class BaseOperations:
    """Query and encoding helpers used by every operation mixin."""

    serializer: Serializer

    def with_connection(self, fn: Callable[[Any], T]) -> T:
        raise NotImplementedError

    def transaction(self, fn: Callable[[Any], T]) -> T:
        raise NotImplementedError

    def _fetch_all(self, query: Any, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        return self.with_connection(lambda conn: run_query(conn, query, params))

    def _fetch_one(self, query: Any, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
        rows = self._fetch_all(query, params)
        return rows[0] if rows else None

    def _fetch_value(self, query: Any, params: Sequence[Any], column: str) -> Any:
        row = self._fetch_one(query, params)
        return row[column] if row else None

    def _encode_message(self, message: Any) -> str:
        if isinstance(message, str):
            return message
        return self.serializer.serialize(message)

    @staticmethod
    def _encode_json(value: Any) -> Optional[str]:
        """JSON text for headers and conditionals; strings are sent as-is."""
        if value is None or isinstance(value, str):
            return value
        try:
            return json.dumps(value)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Failed to serialize value to JSON: {e}") from e


__all__ = [
    "DEFAULT_VT",
    "MAX_QUEUE_NAME_LENGTH",
    "MAX_MULTI_QUEUES",
    "ConnectionProvider",
    "BaseOperations",
    "validate_queue_name",
    "validate_queue_list",
    "validate_queue_mapping",
    "run_query",
]
