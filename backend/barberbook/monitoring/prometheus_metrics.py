"""
Prometheus metrics for barberbook.

Everything lives in a private registry that ``/metrics`` renders:
- per-operation timings and outcomes fed by ``BaseService.measure_operation``
- professional lock acquire/release outcomes and wait time
- retries of bookings aborted by transient store conflicts
"""

from typing import Optional, cast

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "barberbook_service_operation_duration_seconds",
    "Time spent in a service operation",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "barberbook_service_operations_total",
    "Service operations by outcome",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

service_errors_total = Counter(
    "barberbook_service_errors_total",
    "Service operations that raised, by exception type",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

professional_lock_total = Counter(
    "barberbook_professional_lock_total",
    "Per-professional booking lock outcomes",
    ["backend", "action", "outcome"],
    registry=REGISTRY,
)

professional_lock_wait_seconds = Histogram(
    "barberbook_professional_lock_wait_seconds",
    "Time spent waiting for the per-professional booking lock",
    ["backend"],
    registry=REGISTRY,
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0),
)

db_retries_total = Counter(
    "barberbook_db_retries_total",
    "Retries of transactions aborted by transient store conflicts",
    ["operation"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Thin recording facade so callers never touch metric objects directly."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record one finished service call.

        Args:
            service: Service class name, e.g. ``AppointmentScheduler``
            operation: Name given to ``measure_operation``
            duration: Wall time in seconds
            status: ``success`` or ``error``
            error_type: Exception class name when ``status`` is ``error``
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            service_errors_total.labels(
                service=service, operation=operation, error_type=error_type
            ).inc()

    @staticmethod
    def record_professional_lock(backend: str, action: str, outcome: str) -> None:
        professional_lock_total.labels(backend=backend, action=action, outcome=outcome).inc()

    @staticmethod
    def observe_professional_lock_wait(backend: str, waited: float) -> None:
        professional_lock_wait_seconds.labels(backend=backend).observe(max(waited, 0.0))

    @staticmethod
    def inc_db_retry(operation: str) -> None:
        db_retries_total.labels(operation=operation).inc()

    @staticmethod
    def get_metrics() -> bytes:
        return cast(bytes, generate_latest(REGISTRY))

    @staticmethod
    def get_content_type() -> str:
        return cast(str, CONTENT_TYPE_LATEST)


prometheus_metrics = PrometheusMetrics()
