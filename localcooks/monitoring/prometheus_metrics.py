"""
Prometheus metrics for the LocalCooks backend.

Service timings come from the ``@BaseService.measure_operation`` decorator;
domain counters track checkout decisions, Stripe Connect onboarding and
microlearning completions.
"""

from typing import Optional, cast

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "localcooks_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "localcooks_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "localcooks_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

http_errors_total = Counter(
    "localcooks_http_errors_total",
    "Problem responses returned to clients",
    ["status", "code"],
    registry=REGISTRY,
)

storage_checkout_decisions_total = Counter(
    "localcooks_storage_checkout_decisions_total",
    "Manager decisions on storage checkout requests",
    ["action"],  # clear | start_claim | deny
    registry=REGISTRY,
)

stripe_connect_onboarding_total = Counter(
    "localcooks_stripe_connect_onboarding_total",
    "Stripe Connect onboarding events",
    ["role", "event"],  # account_created | link_created | completed
    registry=REGISTRY,
)

microlearning_completions_total = Counter(
    "localcooks_microlearning_completions_total",
    "Confirmed microlearning module completions",
    registry=REGISTRY,
)

notifications_total = Counter(
    "localcooks_notifications_total",
    "Notification send attempts by template and outcome",
    ["template", "status"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Manages Prometheus metrics collection and exposure."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def record_http_error(status_code: int, code: str) -> None:
        http_errors_total.labels(status=str(status_code), code=code).inc()

    @staticmethod
    def record_checkout_decision(action: str) -> None:
        storage_checkout_decisions_total.labels(action=action).inc()

    @staticmethod
    def record_stripe_onboarding(role: str, event: str) -> None:
        stripe_connect_onboarding_total.labels(role=role, event=event).inc()

    @staticmethod
    def record_microlearning_completion() -> None:
        microlearning_completions_total.inc()

    @staticmethod
    def record_notification(template: str, status: str) -> None:
        notifications_total.labels(template=template, status=status).inc()

    @staticmethod
    def get_metrics() -> bytes:
        """Generate Prometheus metrics in exposition format."""
        return cast(bytes, generate_latest(REGISTRY))

    @staticmethod
    def get_content_type() -> str:
        return cast(str, CONTENT_TYPE_LATEST)


prometheus_metrics = PrometheusMetrics()
