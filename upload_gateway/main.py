# upload_gateway/main.py
from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from upload_gateway.api.problem_details import register_exception_handlers
from upload_gateway.core.logging_config import logger, setup_logging
from upload_gateway.core.settings import Settings, get_settings
from upload_gateway.infra.s3_client import build_s3_client
from upload_gateway.middleware.request_id import RequestIdMiddleware
from upload_gateway.observability.metrics import router as metrics_router
from upload_gateway.routers import storage
from upload_gateway.services.multipart import UploadOrchestrator
from upload_gateway.services.signer import S3Signer
from upload_gateway.services.upload_tracker import UploadTracker


def create_app(
    settings: Optional[Settings] = None,
    signer: Optional[S3Signer] = None,
    tracker: Optional[UploadTracker] = None,
) -> FastAPI:
    """
    Bouwt de app met precies één signer, orchestrator en tracker per proces.
    Tests geven hun eigen signer/tracker mee.
    """
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    if signer is None:
        signer = S3Signer(build_s3_client(settings), settings.S3_BUCKET)

    app = FastAPI(title="Upload Gateway", version="0.1.0")

    app.state.settings = settings
    app.state.orchestrator = UploadOrchestrator(
        signer,
        default_expiration_minutes=settings.DEFAULT_EXPIRATION_MINUTES,
    )
    app.state.tracker = tracker if tracker is not None else UploadTracker(shards=settings.TRACKER_SHARDS)

    # ----------------------------------------------------
    # Middleware
    # ----------------------------------------------------
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    register_exception_handlers(app)

    # ----------------------------------------------------
    # Routers
    # ----------------------------------------------------
    @app.get("/health", include_in_schema=True)
    def health() -> dict:
        return {"status": "ok"}

    app.include_router(storage.router)
    app.include_router(metrics_router)  # /metrics

    logger.info("startup", service="upload-gateway", bucket=settings.S3_BUCKET, env=settings.app_env)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("upload_gateway.main:app", host="0.0.0.0", port=8000)
