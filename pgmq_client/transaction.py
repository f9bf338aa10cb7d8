"""
Run several queue operations atomically on one connection.

    def move(txn):
        msg = txn.pop("incoming")
        if msg:
            txn.produce("processing", msg.message)
        return msg

    client.transaction(move)

The block receives a TransactionalClient: the full queue-operation surface,
bound to the connection held for the transaction. Operations called on the
original client inside the block use other pooled connections and are not
part of the transaction.
"""
from typing import Any, Callable, TypeVar

from pgmq_client.client.base import ConnectionProvider
from pgmq_client.client.operations import QueueOperations
from pgmq_client.core.errors import ConnectionError, ErrorKind
from pgmq_client.core.logger import setup_logger

logger = setup_logger(__name__, include_location=True)

T = TypeVar("T")


def _is_transaction_error(error: Exception) -> bool:
    """A nested block already failed and wrapped its error."""
    return isinstance(error, ConnectionError) and error.kind == ErrorKind.TRANSACTION


class TransactionMixin:
    """Adds transaction(fn) to a client owning a ConnectionManager."""

    def transaction(self, fn: Callable[["TransactionalClient"], T]) -> T:
        """
        Call fn(txn) inside BEGIN/COMMIT on one leased connection.

        Any exception rolls the transaction back. The connection is checked
        out once, health-checked, and never retried.

        Raises:
            ConnectionError: kind TRANSACTION, chained to the original error
        """
        try:
            with self.connection.lease() as conn:
                with conn.transaction():
                    return fn(TransactionalClient(self, conn))
        except Exception as e:
            logger.error(f"Transaction rolled back: {type(e).__name__}: {e}")
            if _is_transaction_error(e):
                raise
            raise ConnectionError(f"Transaction failed: {e}", kind=ErrorKind.TRANSACTION) from e


class TransactionalClient(QueueOperations):
    """
    Queue operations bound to the connection of an open transaction.

    Nested transaction() calls become savepoints on the same connection.
    """

    def __init__(self, parent: ConnectionProvider, conn: Any):
        self._parent = parent
        self._conn = conn

    @property
    def connection(self):
        return self._parent.connection

    @property
    def serializer(self):
        return self._parent.serializer

    def with_connection(self, fn: Callable[[Any], T]) -> T:
        return fn(self._conn)

    def transaction(self, fn: Callable[["TransactionalClient"], T]) -> T:
        try:
            with self._conn.transaction():
                return fn(self)
        except Exception as e:
            logger.error(f"Savepoint rolled back: {type(e).__name__}: {e}")
            if _is_transaction_error(e):
                raise
            raise ConnectionError(f"Transaction failed: {e}", kind=ErrorKind.TRANSACTION) from e


__all__ = ["TransactionMixin", "TransactionalClient"]
