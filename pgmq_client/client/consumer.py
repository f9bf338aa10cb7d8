from typing import Any, List, Optional

from pgmq_client.client.base import DEFAULT_VT, BaseOperations, validate_queue_name
from pgmq_client.models import Message


class ConsumerMixin(BaseOperations):
    """
    Reading from a single queue.

    Read messages stay in the queue and become visible again after `vt`
    seconds unless deleted or archived. `conditional` is a JSONB containment
    filter: only messages whose payload contains it are returned.
    """

    def read(self, queue_name: str, vt: int = DEFAULT_VT, conditional: Any = None) -> Optional[Message]:
        messages = self.read_batch(queue_name, vt=vt, qty=1, conditional=conditional)
        return messages[0] if messages else None

    def read_batch(
            self,
            queue_name: str,
            vt: int = DEFAULT_VT,
            qty: int = 1,
            conditional: Any = None,
    ) -> List[Message]:
        validate_queue_name(queue_name)
        if conditional:
            rows = self._fetch_all(
                "SELECT * FROM pgmq.read(%s::text, %s::integer, %s::integer, %s::jsonb)",
                (queue_name, vt, qty, self._encode_json(conditional)),
            )
        else:
            rows = self._fetch_all(
                "SELECT * FROM pgmq.read(%s::text, %s::integer, %s::integer)",
                (queue_name, vt, qty),
            )
        return [Message.from_row(row) for row in rows]

    def read_with_poll(
            self,
            queue_name: str,
            vt: int = DEFAULT_VT,
            qty: int = 1,
            max_poll_seconds: int = 5,
            poll_interval_ms: int = 100,
            conditional: Any = None,
    ) -> List[Message]:
        """
        Long-poll inside the database until messages arrive or
        max_poll_seconds elapse. Holds one pooled connection while waiting.
        """
        validate_queue_name(queue_name)
        if conditional:
            rows = self._fetch_all(
                "SELECT * FROM pgmq.read_with_poll(%s::text, %s::integer, %s::integer, "
                "%s::integer, %s::integer, %s::jsonb)",
                (queue_name, vt, qty, max_poll_seconds, poll_interval_ms, self._encode_json(conditional)),
            )
        else:
            rows = self._fetch_all(
                "SELECT * FROM pgmq.read_with_poll(%s::text, %s::integer, %s::integer, %s::integer, %s::integer)",
                (queue_name, vt, qty, max_poll_seconds, poll_interval_ms),
            )
        return [Message.from_row(row) for row in rows]

    def read_grouped_rr(self, queue_name: str, vt: int = DEFAULT_VT, qty: int = 1) -> List[Message]:
        """Round-robin read across message groups (FIFO group key in headers)."""
        validate_queue_name(queue_name)
        rows = self._fetch_all(
            "SELECT * FROM pgmq.read_grouped_rr(%s::text, %s::integer, %s::integer)",
            (queue_name, vt, qty),
        )
        return [Message.from_row(row) for row in rows]

    def read_grouped_rr_with_poll(
            self,
            queue_name: str,
            vt: int = DEFAULT_VT,
            qty: int = 1,
            max_poll_seconds: int = 5,
            poll_interval_ms: int = 100,
    ) -> List[Message]:
        validate_queue_name(queue_name)
        rows = self._fetch_all(
            "SELECT * FROM pgmq.read_grouped_rr_with_poll(%s::text, %s::integer, %s::integer, "
            "%s::integer, %s::integer)",
            (queue_name, vt, qty, max_poll_seconds, poll_interval_ms),
        )
        return [Message.from_row(row) for row in rows]
