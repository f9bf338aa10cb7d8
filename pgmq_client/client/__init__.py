from pgmq_client.client.base import (
    DEFAULT_VT,
    BaseOperations,
    ConnectionProvider,
    validate_queue_name,
)
from pgmq_client.client.operations import QueueOperations

__all__ = [
    "DEFAULT_VT",
    "BaseOperations",
    "ConnectionProvider",
    "QueueOperations",
    "validate_queue_name",
]
