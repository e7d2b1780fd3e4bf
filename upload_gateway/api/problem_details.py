# upload_gateway/api/problem_details.py
"""
Single place where errors become HTTP responses.

Every error is rendered as a problem body::

    {status, title, detail, instance, traceId, timestamp, [uploadId], [fileName], [field]}

Storage failures never leak their underlying cause to the caller.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Tuple

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from upload_gateway.core.errors import DOMAIN_ERRORS, ErrorKind
from upload_gateway.core.logging_config import logger
from upload_gateway.middleware.request_id import REQUEST_ID_HEADER, get_request_id

PROBLEM_MEDIA_TYPE = "application/problem+json"

GENERIC_PRESIGN_DETAIL = "Failed to generate presigned URL. Please try again."
GENERIC_UNEXPECTED_DETAIL = "An unexpected error occurred. Please try again later."


def map_error(exc: Exception) -> Tuple[int, str, str]:
    kind = getattr(exc, "kind", ErrorKind.UNEXPECTED)

    if kind is ErrorKind.UPLOAD_NOT_FOUND:
        return 404, "Upload Not Found", exc.message
    if kind is ErrorKind.INVALID_REQUEST:
        return 400, "Invalid Request", exc.message
    if kind is ErrorKind.PRESIGN_FAILED:
        return 500, "URL Generation Failed", GENERIC_PRESIGN_DETAIL
    if kind is ErrorKind.MULTIPART_FAILED:
        # domeinmelding, de oorzaak zit alleen in __cause__
        return 500, "Upload Failed", exc.message
    return 500, "Internal Server Error", GENERIC_UNEXPECTED_DETAIL


def error_context(exc: Exception) -> Dict[str, Any]:
    ctx: Dict[str, Any] = {}
    for attr, key in (("upload_id", "uploadId"), ("file_name", "fileName"), ("field", "field")):
        value = getattr(exc, attr, None)
        if value is not None:
            ctx[key] = value
    return ctx


def problem_response(
    request: Request,
    status: int,
    title: str,
    detail: str,
    extra: Dict[str, Any] | None = None,
) -> JSONResponse:
    trace_id = get_request_id(request)
    body: Dict[str, Any] = {
        "status": status,
        "title": title,
        "detail": detail,
        "instance": request.url.path,
        "traceId": trace_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if extra:
        body.update(extra)

    return JSONResponse(
        status_code=status,
        content=body,
        media_type=PROBLEM_MEDIA_TYPE,
        headers={REQUEST_ID_HEADER: trace_id},
    )


def handle_domain_error(request: Request, exc: Exception) -> JSONResponse:
    status, title, detail = map_error(exc)
    log = logger.error if status >= 500 else logger.warning
    log(
        "request_error",
        error_type=type(exc).__name__,
        trace_id=get_request_id(request),
        status=status,
        exc_info=exc if status >= 500 else None,
    )
    return problem_response(request, status, title, detail, error_context(exc))


def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path")]
    field = ".".join(loc) or None
    msg = first.get("msg", "Required parameter is missing")
    detail = f"'{field}': {msg}" if field else msg

    logger.warning("request_invalid", trace_id=get_request_id(request), errors=len(errors))
    return problem_response(request, 400, "Invalid Request", detail, {"field": field} if field else None)


def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    status, title, detail = map_error(exc)
    logger.error(
        "unhandled_exception",
        error_type=type(exc).__name__,
        trace_id=get_request_id(request),
        exc_info=exc,
    )
    return problem_response(request, status, title, detail)


def register_exception_handlers(app: FastAPI) -> None:
    for error_cls in DOMAIN_ERRORS:
        app.add_exception_handler(error_cls, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
