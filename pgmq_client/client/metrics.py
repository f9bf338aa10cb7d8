from typing import List, Optional

from pgmq_client.client.base import BaseOperations, validate_queue_name
from pgmq_client.models import QueueMetrics


class MetricsMixin(BaseOperations):

    def metrics(self, queue_name: str) -> Optional[QueueMetrics]:
        validate_queue_name(queue_name)
        row = self._fetch_one("SELECT * FROM pgmq.metrics(%s::text)", (queue_name,))
        return QueueMetrics.from_row(row) if row else None

    def metrics_all(self) -> List[QueueMetrics]:
        return [QueueMetrics.from_row(row) for row in self._fetch_all("SELECT * FROM pgmq.metrics_all()")]
