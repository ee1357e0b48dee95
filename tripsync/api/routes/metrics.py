"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint.

    Exposes generation_requests_total, generation_outcomes_total,
    generation_duration_seconds, route_lookups_total and schedule_edits_total.
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
