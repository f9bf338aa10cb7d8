from pgmq_client.client.base import BaseOperations, validate_queue_name
from pgmq_client.core.logger import LoggingContext, setup_logger

logger = setup_logger(__name__, include_location=True)


class MaintenanceMixin(BaseOperations):

    def purge_queue(self, queue_name: str) -> int:
        """Delete every message in the queue; returns how many were removed."""
        validate_queue_name(queue_name)
        with LoggingContext(queue_name=queue_name):
            purged = self._fetch_value("SELECT pgmq.purge_queue(%s::text)", (queue_name,), "purge_queue")
            logger.info(f"Purged {purged} message(s)")
        return int(purged or 0)

    def detach_archive(self, queue_name: str) -> None:
        """Detach the archive table from the extension so drop_queue leaves it in place."""
        validate_queue_name(queue_name)
        self._fetch_all("SELECT pgmq.detach_archive(%s::text)", (queue_name,))

    def enable_notify_insert(self, queue_name: str, throttle_interval_ms: int = 250) -> None:
        """
        Emit a NOTIFY on every insert into the queue, at most once per
        throttle interval. Listen on channel `pgmq.q_<queue_name>.INSERT`.
        """
        validate_queue_name(queue_name)
        self._fetch_all(
            "SELECT pgmq.enable_notify_insert(%s::text, %s::integer)",
            (queue_name, throttle_interval_ms),
        )

    def disable_notify_insert(self, queue_name: str) -> None:
        validate_queue_name(queue_name)
        self._fetch_all("SELECT pgmq.disable_notify_insert(%s::text)", (queue_name,))
