# localcooks/routes/v1/metrics.py
"""
Prometheus metrics endpoint.

Public, following standard Prometheus practice; exposes the counters and
histograms recorded by ``BaseService.measure_operation``.
"""

from fastapi import APIRouter, Response

from ...monitoring.prometheus_metrics import prometheus_metrics

router = APIRouter(tags=["monitoring-v1"])


@router.get("/metrics/prometheus", include_in_schema=False)
async def get_prometheus_metrics() -> Response:
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )


__all__ = ["router"]
