"""
MessagePack codec for compact binary payloads.

The packed bytes are base64-encoded and wrapped in a JSON object so they can
be stored in a jsonb column:

    {"_msgpack": "gqR0eXBlpW9yZGVy..."}

Payloads without the marker (written by other producers) are returned as
parsed JSON. Requires the optional ``msgpack`` package
(``pip install pgmq-client[msgpack]``).
"""
import base64
import json
from typing import Any

from pgmq_client.core.errors import DeserializationError, SerializationError
from pgmq_client.serializers.base import Serializer

MARKER = "_msgpack"


def _msgpack():
    try:
        import msgpack
    except ImportError as e:
        raise SerializationError(
            "msgpack package is required for MessagePackSerializer; "
            "install it with 'pip install pgmq-client[msgpack]'"
        ) from e
    return msgpack


class MessagePackSerializer(Serializer):

    def serialize(self, obj: Any) -> str:
        msgpack = _msgpack()
        try:
            packed = msgpack.packb(obj, use_bin_type=True)
        except (TypeError, ValueError, OverflowError) as e:
            raise SerializationError(f"Failed to serialize with MessagePack: {e}") from e
        return json.dumps({MARKER: base64.b64encode(packed).decode("ascii")})

    def deserialize(self, text: str) -> Any:
        msgpack = _msgpack()
        try:
            parsed = json.loads(text)
            if not (isinstance(parsed, dict) and MARKER in parsed):
                return parsed
            packed = base64.b64decode(parsed[MARKER], validate=True)
            return msgpack.unpackb(packed, raw=False)
        except (TypeError, ValueError, msgpack.UnpackException) as e:
            raise DeserializationError(f"Failed to deserialize with MessagePack: {e}") from e
