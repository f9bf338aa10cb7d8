"""
Typed value objects built from PGMQ result rows.

Rows arrive as dicts (psycopg dict_row). json/jsonb columns are loaded as raw
text by the connection factory; connections supplied by a user callable may
still decode them, so payload fields re-encode anything that is not text.
"""
import json
from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_json_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8")
    return json.dumps(value)


def _as_bool(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("t", "true")
    return bool(value)


class _Row(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    @classmethod
    def from_row(cls, row: Mapping[str, Any]):
        return cls.model_validate(dict(row))


class Message(_Row):
    """
    A queue message as returned by read, pop and set_vt.

    `message` and `headers` hold the JSON text stored by the extension; decode
    them with the client serializer.
    """

    msg_id: int
    read_ct: int = 0
    enqueued_at: Optional[datetime] = None
    vt: Optional[datetime] = None
    message: Optional[str] = None
    headers: Optional[str] = None
    queue_name: Optional[str] = Field(
        default=None,
        description="Source queue; only set by multi-queue reads"
    )

    @field_validator("message", "headers", mode="before")
    def raw_json(cls, v):
        return _as_json_text(v)

    @property
    def id(self) -> int:
        return self.msg_id


class QueueMetrics(_Row):
    """Point-in-time statistics for one queue."""

    queue_name: str
    queue_length: int
    newest_msg_age_sec: Optional[int] = None
    oldest_msg_age_sec: Optional[int] = None
    total_messages: int
    scrape_time: datetime
    queue_visible_length: Optional[int] = Field(
        default=None,
        description="Messages currently visible; reported by newer extension versions"
    )


class QueueMetadata(_Row):
    queue_name: str
    created_at: Optional[datetime] = None
    is_partitioned: bool = False
    is_unlogged: bool = False

    @field_validator("is_partitioned", "is_unlogged", mode="before")
    def coerce_flag(cls, v):
        return _as_bool(v)

    @property
    def partitioned(self) -> bool:
        return self.is_partitioned

    @property
    def unlogged(self) -> bool:
        return self.is_unlogged


class TopicBinding(_Row):
    """A routing pattern bound to a queue."""

    pattern: str
    queue_name: str
    bound_at: Optional[datetime] = None


class TopicDelivery(_Row):
    """One message id produced into one queue by a topic send."""

    queue_name: str
    msg_id: int


__all__ = [
    "Message",
    "QueueMetrics",
    "QueueMetadata",
    "TopicBinding",
    "TopicDelivery",
]
