"""Error Handlers — every failed request answers with the same error envelope.

Invariants:
    - Envelope: {"error": {code, message, category, severity, ...}} for domain,
      validation, routing, and unexpected failures alike
    - HaccpError carries its own status; 4xx logs at WARNING, 5xx at ERROR
    - Validation details name the offending field without the request-part
      prefix (measurements.0.value) and report the part separately (body/query/path)
    - Unexpected exceptions never leak internals

Design Decisions:
    - Starlette HTTPException folded into the envelope so clients parse one shape
      (unknown route, wrong method)
    - Extracted from main.py (ADR: ExMA import fan-out < 10)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from haccp_compliance.core.errors import ErrorCategory, ErrorSeverity, HaccpError

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    status.HTTP_404_NOT_FOUND: "ROUTE_NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
}


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HaccpError, handle_haccp_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


def error_envelope(
    code: str, message: str, category: str, severity: ErrorSeverity, **extra,
) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category,
            "severity": severity.value,
            **extra,
        },
    }


async def handle_haccp_error(request: Request, exc: HaccpError) -> JSONResponse:
    level = logging.WARNING if exc.http_status < 500 else logging.ERROR
    logger.log(
        level,
        f"HaccpError: {exc.message}",
        extra={
            "error_code": exc.code,
            "path": request.url.path,
            "source_id": exc.context.source_id,
        },
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


def validation_details(exc: RequestValidationError) -> list[dict]:
    details = []
    for e in exc.errors():
        loc = [str(part) for part in e["loc"]]
        location = loc[0] if loc and loc[0] in ("body", "query", "path", "header") else ""
        field_path = loc[1:] if location else loc
        details.append({
            "location": location,
            "field": ".".join(field_path),
            "message": e["msg"],
            "type": e["type"],
        })
    return details


async def handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = validation_details(exc)
    logger.warning(
        f"Validation error on {request.url.path}: "
        f"{', '.join(d['field'] or d['location'] for d in details)}",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_envelope(
            "VALIDATION_ERROR", "Invalid request data",
            ErrorCategory.VALIDATION.value, ErrorSeverity.ERROR, details=details,
        ),
    )


async def handle_http_error(
    request: Request, exc: StarletteHTTPException,
) -> JSONResponse:
    logger.warning(
        f"HTTP {exc.status_code} on {request.method} {request.url.path}",
        extra={"path": request.url.path},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(
            HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR"),
            str(exc.detail), "http", ErrorSeverity.WARNING,
        ),
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}",
        exc_info=True,
        extra={"path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred",
            ErrorCategory.INTERNAL.value, ErrorSeverity.CRITICAL,
        ),
    )
