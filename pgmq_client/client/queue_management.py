from typing import List

from pgmq_client.client.base import BaseOperations, run_query, validate_queue_name
from pgmq_client.core.logger import LoggingContext, setup_logger
from pgmq_client.models import QueueMetadata

logger = setup_logger(__name__, include_location=True)

QUEUE_EXISTS_SQL = "SELECT 1 FROM pgmq.meta WHERE queue_name = %s LIMIT 1"


class QueueManagementMixin(BaseOperations):
    """Queue lifecycle: create, drop, list."""

    def _create_with(self, query: str, params: tuple) -> bool:
        # existence check and create share one connection
        def run(conn) -> bool:
            existed = bool(run_query(conn, QUEUE_EXISTS_SQL, (params[0],)))
            run_query(conn, query, params)
            return not existed

        # retry warnings from with_connection carry the queue name too
        with LoggingContext(queue_name=params[0]):
            created = self.with_connection(run)
            if created:
                logger.info(f"Created queue '{params[0]}'")
        return created

    def create(self, queue_name: str) -> bool:
        """Create a standard queue. Returns False if it already existed."""
        validate_queue_name(queue_name)
        return self._create_with("SELECT pgmq.create(%s::text)", (queue_name,))

    def create_partitioned(
            self,
            queue_name: str,
            partition_interval: str = "10000",
            retention_interval: str = "100000",
    ) -> bool:
        """
        Create a partitioned queue (requires pg_partman).

        Intervals are either message-id counts ("10000") or time spans
        ("1 day").
        """
        validate_queue_name(queue_name)
        return self._create_with(
            "SELECT pgmq.create_partitioned(%s::text, %s::text, %s::text)",
            (queue_name, str(partition_interval), str(retention_interval)),
        )

    def create_unlogged(self, queue_name: str) -> bool:
        """Create an unlogged queue: faster writes, not crash-safe."""
        validate_queue_name(queue_name)
        return self._create_with("SELECT pgmq.create_unlogged(%s::text)", (queue_name,))

    def drop_queue(self, queue_name: str) -> bool:
        validate_queue_name(queue_name)
        dropped = self._fetch_value("SELECT pgmq.drop_queue(%s::text)", (queue_name,), "drop_queue")
        return bool(dropped)

    def list_queues(self) -> List[QueueMetadata]:
        rows = self._fetch_all("SELECT * FROM pgmq.list_queues()")
        return [QueueMetadata.from_row(row) for row in rows]
