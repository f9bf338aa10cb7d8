"""
Operations spanning several queues in one statement.

Each queue contributes one SELECT to a UNION ALL; queue names are validated
and embedded as SQL literals, tagged on every row as `queue_name`.
"""
import time
from typing import List, Optional

from psycopg import sql

from pgmq_client.client.base import DEFAULT_VT, BaseOperations, validate_queue_list
from pgmq_client.core.logger import setup_logger
from pgmq_client.models import Message

logger = setup_logger(__name__, include_location=True)


def _union_all(parts: List[sql.Composable], limit: Optional[int] = None) -> sql.Composed:
    query = sql.SQL("\nUNION ALL\n").join(parts)
    if limit is not None:
        query = sql.SQL("{}\nLIMIT {}").format(query, sql.Literal(int(limit)))
    return query


class MultiQueueMixin(BaseOperations):

    def read_multi(
            self,
            queue_names: List[str],
            vt: int = DEFAULT_VT,
            qty: int = 1,
            limit: Optional[int] = None,
    ) -> List[Message]:
        """
        Read up to `qty` messages from each queue, at most `limit` in total.

            for msg in client.read_multi(["orders", "emails"], vt=30, limit=10):
                client.delete(msg.queue_name, msg.msg_id)
        """
        validate_queue_list(queue_names)
        parts = [
            sql.SQL("SELECT {name}::text AS queue_name, * FROM pgmq.read({name}::text, {vt}, {qty})").format(
                name=sql.Literal(queue_name),
                vt=sql.Literal(int(vt)),
                qty=sql.Literal(int(qty)),
            )
            for queue_name in queue_names
        ]
        rows = self._fetch_all(_union_all(parts, limit))
        return [Message.from_row(row) for row in rows]

    def read_multi_with_poll(
            self,
            queue_names: List[str],
            vt: int = DEFAULT_VT,
            qty: int = 1,
            limit: Optional[int] = None,
            max_poll_seconds: float = 5,
            poll_interval_ms: int = 100,
    ) -> List[Message]:
        """
        Poll read_multi until something arrives or max_poll_seconds elapse.

        Sleeps between attempts without holding a connection. Returns [] on
        timeout.
        """
        validate_queue_list(queue_names)
        started = time.monotonic()
        interval = poll_interval_ms / 1000.0

        while True:
            messages = self.read_multi(queue_names, vt=vt, qty=qty, limit=limit)
            if messages:
                return messages

            elapsed = time.monotonic() - started
            if elapsed >= max_poll_seconds:
                logger.debug(f"No messages on {len(queue_names)} queue(s) after {elapsed:.2f}s")
                return []
            time.sleep(min(interval, max_poll_seconds - elapsed))

    def pop_multi(self, queue_names: List[str]) -> Optional[Message]:
        """Atomically read and delete the first available message from any queue."""
        validate_queue_list(queue_names)
        parts = [
            sql.SQL("SELECT {name}::text AS queue_name, * FROM pgmq.pop({name}::text)").format(
                name=sql.Literal(queue_name),
            )
            for queue_name in queue_names
        ]
        rows = self._fetch_all(_union_all(parts, 1))
        return Message.from_row(rows[0]) if rows else None
