from abc import ABC, abstractmethod
from typing import Any


class Serializer(ABC):
    """
    Payload codec used by the client.

    serialize() must return JSON text, since the extension stores payloads as
    jsonb; deserialize() takes that text back.
    """

    @abstractmethod
    def serialize(self, obj: Any) -> str:
        ...

    @abstractmethod
    def deserialize(self, text: str) -> Any:
        ...
