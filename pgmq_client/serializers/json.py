import json
from typing import Any, Mapping

from pgmq_client.core.errors import SerializationError
from pgmq_client.serializers.base import Serializer


class JsonSerializer(Serializer):
    """Default codec: plain JSON. Strings are assumed to be JSON already."""

    def serialize(self, obj: Any) -> str:
        if isinstance(obj, str):
            return obj
        try:
            return json.dumps(obj)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Failed to serialize object to JSON: {e}") from e

    def deserialize(self, text: Any) -> Any:
        if isinstance(text, Mapping):
            return text
        try:
            return json.loads(text)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Failed to deserialize JSON: {e}") from e
