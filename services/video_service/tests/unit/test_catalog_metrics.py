"""Unit tests for Video Service metrics implementation."""

from __future__ import annotations

from unittest.mock import MagicMock

from prometheus_client import CollectorRegistry
from videoup_common.observability_enums import OperationType
from videoup_common.status_enums import OperationStatus

from services.video_service.implementations.prometheus_catalog_metrics import (
    PrometheusCatalogMetrics,
)
from services.video_service.protocols import CatalogMetricsProtocol


class TestPrometheusCatalogMetrics:
    """Test the PrometheusCatalogMetrics implementation."""

    def test_implements_protocol(self, catalog_metrics: PrometheusCatalogMetrics) -> None:
        assert isinstance(catalog_metrics, CatalogMetricsProtocol)

    def test_record_operation_increments_labelled_counter(
        self,
        catalog_metrics: PrometheusCatalogMetrics,
        registry: CollectorRegistry,
    ) -> None:
        catalog_metrics.record_operation(OperationType.UPLOAD, OperationStatus.SUCCESS)
        catalog_metrics.record_operation(OperationType.UPLOAD, OperationStatus.SUCCESS)
        catalog_metrics.record_operation(OperationType.LIKE, OperationStatus.FAILED)

        assert registry.get_sample_value(
            "video_operations_total", {"operation": "upload", "status": "success"}
        ) == 2.0
        assert registry.get_sample_value(
            "video_operations_total", {"operation": "like", "status": "failed"}
        ) == 1.0
        assert registry.get_sample_value(
            "video_operations_total", {"operation": "download", "status": "success"}
        ) is None

    def test_counter_errors_are_swallowed(self) -> None:
        counter = MagicMock()
        counter.labels.side_effect = ValueError("bad labels")
        metrics = PrometheusCatalogMetrics(counter)

        metrics.record_operation(OperationType.READ, OperationStatus.NOT_FOUND)

        counter.labels.assert_called_once_with(operation="read", status="not_found")
