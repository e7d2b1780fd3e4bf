# upload_gateway/middleware/request_id.py
from __future__ import annotations

import time
import uuid
from typing import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from upload_gateway.core.logging_config import logger
from upload_gateway.observability.metrics import latency_hist

REQUEST_ID_HEADER = "X-Request-ID"


def get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or request.headers.get(REQUEST_ID_HEADER) or "-"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Genereert/propagates X-Request-ID, zet 'm in request.state.request_id en
    bindt 'm aan de structlog contextvars zodat elke logregel van deze request
    hem meekrijgt. Logt start en einde met latency.
    """

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        start = time.perf_counter()
        req_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = req_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=req_id)

        client_ip = request.client.host if request.client else "unknown"
        bound_logger = logger.bind(
            ip=client_ip,
            endpoint=str(request.url.path),
            method=request.method,
        )
        bound_logger.info("request_started")

        response = await call_next(request)

        elapsed = time.perf_counter() - start
        latency_ms = round(elapsed * 1000, 2)
        route = request.scope.get("route")
        latency_hist.labels(route=getattr(route, "path", "unmatched")).observe(elapsed)
        bound_logger.info("request_finished", status_code=response.status_code, latency_ms=latency_ms)

        response.headers[REQUEST_ID_HEADER] = req_id
        return response
