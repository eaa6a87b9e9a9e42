# backend/barberbook/routes/health.py
"""
Health check and Prometheus metrics endpoints.

Both are public and unversioned, as load balancers and scrapers expect.
"""

from datetime import datetime, timezone
import logging
from typing import Any, Dict

from fastapi import APIRouter, Response

from .. import __version__
from ..core.config import settings
from ..database import get_db_pool_status
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check() -> Dict[str, Any]:
    return {
        "status": "healthy",
        "service": "barberbook-api",
        "version": __version__,
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "db_pool": get_db_pool_status(),
    }


@router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )
