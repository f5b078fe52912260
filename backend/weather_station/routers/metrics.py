"""
Metrics Router
==============

GET /metrics - Prometheus text format, recomputed on every scrape.

Point Prometheus at it:

    scrape_configs:
      - job_name: esp32
        static_configs:
          - targets: ["weather-backend:5000"]
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse, Response

from weather_station.services import MetricsService

logger = logging.getLogger(__name__)


def build_metrics_router(metrics_service: MetricsService) -> APIRouter:
    router = APIRouter(tags=["metrics"])

    def get_metrics_service() -> MetricsService:
        return metrics_service

    @router.get("/metrics", response_class=Response)
    def get_metrics(service: MetricsService = Depends(get_metrics_service)):
        """Sensor stats + newest reading as Prometheus gauges."""
        try:
            body = service.render()
        except Exception:
            logger.exception("[METRICS] Error generating metrics")
            return PlainTextResponse("# Error generating metrics", status_code=500)
        return Response(content=body, media_type=service.content_type)

    return router
