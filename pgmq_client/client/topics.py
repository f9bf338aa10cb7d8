"""
AMQP-style topic routing (extension v1.11+).

Patterns are dot-separated words where `*` matches exactly one word and `#`
matches zero or more:

    client.bind_topic("orders.*", "new_orders")
    client.bind_topic("orders.#", "order_audit")
    client.produce_topic("orders.created", {"order_id": 42})  # -> 2
"""
from typing import Any, List, Optional, Sequence

from pgmq_client.client.base import BaseOperations, validate_queue_name
from pgmq_client.models import TopicBinding, TopicDelivery


class TopicsMixin(BaseOperations):

    def bind_topic(self, pattern: str, queue_name: str) -> None:
        validate_queue_name(queue_name)
        self._fetch_all("SELECT pgmq.bind_topic(%s::text, %s::text)", (pattern, queue_name))

    def unbind_topic(self, pattern: str, queue_name: str) -> bool:
        """Returns False when no such binding existed."""
        validate_queue_name(queue_name)
        return bool(self._fetch_value(
            "SELECT pgmq.unbind_topic(%s::text, %s::text)", (pattern, queue_name), "unbind_topic"
        ))

    def produce_topic(self, routing_key: str, message: Any, headers: Any = None, delay: int = 0) -> int:
        """Send one message to every queue bound to a matching pattern; returns the queue count."""
        payload = self._encode_message(message)
        if headers is not None:
            count = self._fetch_value(
                "SELECT pgmq.send_topic(%s::text, %s::jsonb, %s::jsonb, %s::integer)",
                (routing_key, payload, self._encode_json(headers), delay),
                "send_topic",
            )
        elif delay > 0:
            count = self._fetch_value(
                "SELECT pgmq.send_topic(%s::text, %s::jsonb, %s::integer)",
                (routing_key, payload, delay),
                "send_topic",
            )
        else:
            count = self._fetch_value(
                "SELECT pgmq.send_topic(%s::text, %s::jsonb)", (routing_key, payload), "send_topic"
            )
        return int(count or 0)

    def produce_batch_topic(
            self,
            routing_key: str,
            messages: Sequence[Any],
            headers: Optional[Sequence[Any]] = None,
            delay: int = 0,
    ) -> List[TopicDelivery]:
        if not messages:
            return []
        if headers is not None and len(headers) != len(messages):
            raise ValueError(
                f"headers array length ({len(headers)}) must match messages array length ({len(messages)})"
            )

        payloads = [self._encode_message(m) for m in messages]
        if headers is not None:
            rows = self._fetch_all(
                "SELECT * FROM pgmq.send_batch_topic(%s::text, %s::jsonb[], %s::jsonb[], %s::integer)",
                (routing_key, payloads, [self._encode_json(h) for h in headers], delay),
            )
        elif delay > 0:
            rows = self._fetch_all(
                "SELECT * FROM pgmq.send_batch_topic(%s::text, %s::jsonb[], %s::integer)",
                (routing_key, payloads, delay),
            )
        else:
            rows = self._fetch_all(
                "SELECT * FROM pgmq.send_batch_topic(%s::text, %s::jsonb[])", (routing_key, payloads)
            )
        return [TopicDelivery.from_row(row) for row in rows]

    def list_topic_bindings(self, queue_name: Optional[str] = None) -> List[TopicBinding]:
        if queue_name is not None:
            validate_queue_name(queue_name)
            rows = self._fetch_all(
                "SELECT pattern, queue_name, bound_at FROM pgmq.list_topic_bindings(%s::text)", (queue_name,)
            )
        else:
            rows = self._fetch_all("SELECT pattern, queue_name, bound_at FROM pgmq.list_topic_bindings()")
        return [TopicBinding.from_row(row) for row in rows]

    def test_routing(self, routing_key: str) -> List[TopicBinding]:
        """Bindings a routing key would be delivered through, without sending anything."""
        rows = self._fetch_all("SELECT pattern, queue_name FROM pgmq.test_routing(%s::text)", (routing_key,))
        return [TopicBinding.from_row(row) for row in rows]

    def validate_routing_key(self, routing_key: str) -> bool:
        return bool(self._fetch_value(
            "SELECT pgmq.validate_routing_key(%s::text)", (routing_key,), "validate_routing_key"
        ))

    def validate_topic_pattern(self, pattern: str) -> bool:
        return bool(self._fetch_value(
            "SELECT pgmq.validate_topic_pattern(%s::text)", (pattern,), "validate_topic_pattern"
        ))
