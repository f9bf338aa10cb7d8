from typing import Any, Dict, List, Mapping, Optional, Sequence

from pgmq_client.client.base import BaseOperations, validate_queue_mapping, validate_queue_name
from pgmq_client.models import Message


class MessageLifecycleMixin(BaseOperations):
    """Pop, delete, archive and visibility-timeout updates."""

    def pop(self, queue_name: str) -> Optional[Message]:
        """Read and delete one message in one step."""
        validate_queue_name(queue_name)
        row = self._fetch_one("SELECT * FROM pgmq.pop(%s::text)", (queue_name,))
        return Message.from_row(row) if row else None

    def pop_batch(self, queue_name: str, qty: int) -> List[Message]:
        validate_queue_name(queue_name)
        if qty <= 0:
            return []
        rows = self._fetch_all("SELECT * FROM pgmq.pop(%s::text, %s::integer)", (queue_name, qty))
        return [Message.from_row(row) for row in rows]

    def delete(self, queue_name: str, msg_id: int) -> bool:
        validate_queue_name(queue_name)
        return bool(self._fetch_value("SELECT pgmq.delete(%s::text, %s::bigint)", (queue_name, msg_id), "delete"))

    def delete_batch(self, queue_name: str, msg_ids: Sequence[int]) -> List[int]:
        """Delete several messages; returns the ids that were actually deleted."""
        validate_queue_name(queue_name)
        if not msg_ids:
            return []
        rows = self._fetch_all("SELECT * FROM pgmq.delete(%s::text, %s::bigint[])", (queue_name, list(msg_ids)))
        return [row["delete"] for row in rows]

    def delete_multi(self, deletions: Mapping[str, Sequence[int]]) -> Dict[str, List[int]]:
        """
        Delete messages from several queues in one transaction.

            client.delete_multi({"orders": [1, 2], "emails": [7]})
            # {'orders': [1, 2], 'emails': [7]}
        """
        validate_queue_mapping(deletions, "deletions")
        if not deletions:
            return {}

        def run(txn) -> Dict[str, List[int]]:
            return {
                queue_name: txn.delete_batch(queue_name, msg_ids)
                for queue_name, msg_ids in deletions.items()
                if msg_ids
            }

        return self.transaction(run)

    def archive(self, queue_name: str, msg_id: int) -> bool:
        """Move a message to the queue's archive table."""
        validate_queue_name(queue_name)
        return bool(self._fetch_value("SELECT pgmq.archive(%s::text, %s::bigint)", (queue_name, msg_id), "archive"))

    def archive_batch(self, queue_name: str, msg_ids: Sequence[int]) -> List[int]:
        validate_queue_name(queue_name)
        if not msg_ids:
            return []
        rows = self._fetch_all("SELECT * FROM pgmq.archive(%s::text, %s::bigint[])", (queue_name, list(msg_ids)))
        return [row["archive"] for row in rows]

    def archive_multi(self, archives: Mapping[str, Sequence[int]]) -> Dict[str, List[int]]:
        """Archive messages from several queues in one transaction."""
        validate_queue_mapping(archives, "archives")
        if not archives:
            return {}

        def run(txn) -> Dict[str, List[int]]:
            return {
                queue_name: txn.archive_batch(queue_name, msg_ids)
                for queue_name, msg_ids in archives.items()
                if msg_ids
            }

        return self.transaction(run)

    def set_vt(self, queue_name: str, msg_id: int, vt_offset: int) -> Optional[Message]:
        """Make a message invisible for vt_offset more seconds from now."""
        validate_queue_name(queue_name)
        row = self._fetch_one(
            "SELECT * FROM pgmq.set_vt(%s::text, %s::bigint, %s::integer)",
            (queue_name, msg_id, vt_offset),
        )
        return Message.from_row(row) if row else None

    def set_vt_batch(self, queue_name: str, msg_ids: Sequence[int], vt_offset: int) -> List[Message]:
        validate_queue_name(queue_name)
        if not msg_ids:
            return []
        rows = self._fetch_all(
            "SELECT * FROM pgmq.set_vt(%s::text, %s::bigint[], %s::integer)",
            (queue_name, list(msg_ids), vt_offset),
        )
        return [Message.from_row(row) for row in rows]

    def set_vt_multi(self, updates: Mapping[str, Sequence[int]], vt_offset: int) -> Dict[str, List[Message]]:
        validate_queue_mapping(updates, "updates")
        if not updates:
            return {}

        def run(txn: Any) -> Dict[str, List[Message]]:
            return {
                queue_name: txn.set_vt_batch(queue_name, msg_ids, vt_offset)
                for queue_name, msg_ids in updates.items()
                if msg_ids
            }

        return self.transaction(run)
