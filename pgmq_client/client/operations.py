from pgmq_client.client.consumer import ConsumerMixin
from pgmq_client.client.maintenance import MaintenanceMixin
from pgmq_client.client.message_lifecycle import MessageLifecycleMixin
from pgmq_client.client.metrics import MetricsMixin
from pgmq_client.client.multi_queue import MultiQueueMixin
from pgmq_client.client.producer import ProducerMixin
from pgmq_client.client.queue_management import QueueManagementMixin
from pgmq_client.client.topics import TopicsMixin


class QueueOperations(
    QueueManagementMixin,
    ProducerMixin,
    ConsumerMixin,
    MultiQueueMixin,
    MessageLifecycleMixin,
    MaintenanceMixin,
    MetricsMixin,
    TopicsMixin,
):
    """Full queue-operation surface shared by Client and TransactionalClient."""
