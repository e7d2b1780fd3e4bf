from __future__ import annotations

from fastapi import Request

from upload_gateway.services.multipart import UploadOrchestrator
from upload_gateway.services.upload_tracker import UploadTracker


def get_orchestrator(request: Request) -> UploadOrchestrator:
    """De orchestrator die create_app() op app.state heeft gezet."""
    return request.app.state.orchestrator


def get_tracker(request: Request) -> UploadTracker:
    return request.app.state.tracker
