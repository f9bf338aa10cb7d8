from pgmq_client.serializers.base import Serializer
from pgmq_client.serializers.json import JsonSerializer
from pgmq_client.serializers.message_pack import MessagePackSerializer

__all__ = ["Serializer", "JsonSerializer", "MessagePackSerializer"]
