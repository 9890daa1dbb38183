"""Prometheus-based catalog metrics implementation."""

from __future__ import annotations

from prometheus_client import Counter
from videoup_common.observability_enums import OperationType
from videoup_common.status_enums import OperationStatus
from videoup_service_libs.logging_utils import create_service_logger

from services.video_service.protocols import CatalogMetricsProtocol

logger = create_service_logger("video.metrics.prometheus")


class PrometheusCatalogMetrics(CatalogMetricsProtocol):
    """Prometheus-based implementation of catalog metrics collection."""

    def __init__(self, video_operations_counter: Counter) -> None:
        """
        Initialize Prometheus catalog metrics.

        Args:
            video_operations_counter: Prometheus counter for catalog operations
        """
        self.video_operations = video_operations_counter

    def record_operation(self, operation: OperationType, status: OperationStatus) -> None:
        try:
            self.video_operations.labels(operation=operation.value, status=status.value).inc()
        except Exception as e:
            logger.error(f"Error recording video operation metric: {e}")
