from typing import Any, List, Optional, Sequence

from pgmq_client.client.base import BaseOperations, validate_queue_name


class ProducerMixin(BaseOperations):
    """Sending messages to a single queue."""

    def produce(self, queue_name: str, message: Any, headers: Any = None, delay: int = 0) -> int:
        """
        Send one message and return its id.

        Args:
            queue_name: target queue
            message: JSON text, or any object the client serializer accepts
            headers: optional mapping or JSON text stored alongside the message
            delay: seconds before the message becomes visible
        """
        validate_queue_name(queue_name)
        payload = self._encode_message(message)

        if headers is not None:
            return self._fetch_value(
                "SELECT * FROM pgmq.send(%s::text, %s::jsonb, %s::jsonb, %s::integer)",
                (queue_name, payload, self._encode_json(headers), delay),
                "send",
            )
        return self._fetch_value(
            "SELECT * FROM pgmq.send(%s::text, %s::jsonb, %s::integer)",
            (queue_name, payload, delay),
            "send",
        )

    def produce_batch(
            self,
            queue_name: str,
            messages: Sequence[Any],
            headers: Optional[Sequence[Any]] = None,
            delay: int = 0,
    ) -> List[int]:
        """Send several messages in one statement; ids come back in input order."""
        validate_queue_name(queue_name)
        if not messages:
            return []
        if headers is not None and len(headers) != len(messages):
            raise ValueError(
                f"headers array length ({len(headers)}) must match messages array length ({len(messages)})"
            )

        payloads = [self._encode_message(m) for m in messages]
        if headers is not None:
            rows = self._fetch_all(
                "SELECT * FROM pgmq.send_batch(%s::text, %s::jsonb[], %s::jsonb[], %s::integer)",
                (queue_name, payloads, [self._encode_json(h) for h in headers], delay),
            )
        else:
            rows = self._fetch_all(
                "SELECT * FROM pgmq.send_batch(%s::text, %s::jsonb[], %s::integer)",
                (queue_name, payloads, delay),
            )
        return [row["send_batch"] for row in rows]

    send = produce
    send_batch = produce_batch
