# backend/routes/deps.py
from fastapi import Request

from services.metrics_service import MetricsService
from services.track_index_service import TrackIndexService


def get_metrics_service(request: Request) -> MetricsService:
    return request.app.state.metrics_service


def get_track_index_service(request: Request) -> TrackIndexService:
    return request.app.state.track_index_service
