"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Expose registered metrics.

    Includes:
    - trip_mutations_total{operation, outcome}
    - trip_saves_total
    - geocode_requests_total{kind, outcome}
    - geocode_latency_ms{kind}
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
