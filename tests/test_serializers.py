import builtins
import json

import pytest

from pgmq_client.core.errors import DeserializationError, SerializationError
from pgmq_client.serializers import JsonSerializer, MessagePackSerializer


def test_json_serializer_passes_strings_through():
    serializer = JsonSerializer()
    assert serializer.serialize('{"already": "json"}') == '{"already": "json"}'
    assert json.loads(serializer.serialize({"order_id": 1})) == {"order_id": 1}


def test_json_serializer_deserialize():
    serializer = JsonSerializer()
    assert serializer.deserialize('{"a": [1, 2]}') == {"a": [1, 2]}
    assert serializer.deserialize({"a": 1}) == {"a": 1}


def test_json_serializer_errors():
    serializer = JsonSerializer()
    with pytest.raises(SerializationError):
        serializer.serialize({"when": object()})
    with pytest.raises(SerializationError):
        serializer.deserialize("{not json")


def test_message_pack_wraps_payload_in_json():
    pytest.importorskip("msgpack")
    serializer = MessagePackSerializer()

    text = serializer.serialize({"order_id": 1, "items": ["a", "b"]})

    assert list(json.loads(text)) == ["_msgpack"]
    assert serializer.deserialize(text) == {"order_id": 1, "items": ["a", "b"]}


def test_message_pack_reads_plain_json():
    pytest.importorskip("msgpack")
    assert MessagePackSerializer().deserialize('{"plain": true}') == {"plain": True}


def test_message_pack_bad_payload():
    pytest.importorskip("msgpack")
    with pytest.raises(DeserializationError):
        MessagePackSerializer().deserialize('{"_msgpack": "%%%not-base64"}')


def test_message_pack_requires_msgpack(monkeypatch):
    real_import = builtins.__import__

    def blocked(name, *args, **kwargs):
        if name == "msgpack":
            raise ImportError("No module named 'msgpack'")
        return real_import(name, *args, **kwargs)

    monkeypatch.setattr(builtins, "__import__", blocked)

    with pytest.raises(SerializationError, match="msgpack package is required"):
        MessagePackSerializer().serialize({"a": 1})
