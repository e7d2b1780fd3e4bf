# upload_gateway/observability/metrics.py
from fastapi import APIRouter
from starlette.responses import Response

from prometheus_client import Counter, Gauge, Histogram, generate_latest, CONTENT_TYPE_LATEST

router = APIRouter(tags=["observability"])

presign_counter = Counter(
    "upload_gateway_presign_total",
    "Number of presigned URL requests",
    ["operation", "result"],  # upload|download|view|part ; success|error
)

multipart_counter = Counter(
    "upload_gateway_multipart_total",
    "Number of multipart workflow calls",
    ["phase", "result"],  # initiate|part-url|complete ; success|error
)

tracked_uploads_gauge = Gauge(
    "upload_gateway_tracked_uploads",
    "Uploads currently held by the in-memory tracker",
)

latency_hist = Histogram(
    "upload_gateway_api_latency_seconds",
    "API latency per route",
    ["route"],
)


@router.get("/metrics", include_in_schema=True)
def metrics() -> Response:
    # Prometheus expects text/plain; version=0.0.4
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
