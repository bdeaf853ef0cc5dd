"""Error Handlers — map exceptions to the API's error envelope.

Invariants:
    - Every error response body is {"error": {code, message, category, severity, ...}}
    - EmpirionError keeps its own http_status and context (to_response)
    - Request validation failures are 400 VALIDATION_ERROR with per-field details
    - Anything else is 500 INTERNAL_ERROR; the exception text never reaches the client

Design Decisions:
    - 4xx domain errors log at WARNING, 5xx at ERROR: plan rejections are expected traffic
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from empirion.core.errors import EmpirionError, ErrorSeverity

logger = logging.getLogger(__name__)


def _envelope(code: str, message: str, category: str, **extra) -> dict:
    severity = extra.pop("severity", ErrorSeverity.ERROR.value)
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category,
            "severity": severity,
            **extra,
        },
    }


async def handle_empirion_error(request: Request, exc: EmpirionError) -> JSONResponse:
    level = logging.ERROR if exc.http_status >= 500 else logging.WARNING
    logger.log(
        level,
        f"{exc.code}: {exc.message}",
        extra={
            "error_code": exc.code,
            "path": request.url.path,
            "team_id": exc.context.team_id,
            "round_number": exc.context.round_number,
        },
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    logger.warning(
        f"Rejected request with {len(details)} invalid field(s)",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            "VALIDATION_ERROR", "Invalid request data", "validation", details=details,
        ),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {type(exc).__name__}",
        exc_info=exc,
        extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred", "internal",
            severity=ErrorSeverity.CRITICAL.value,
        ),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EmpirionError, handle_empirion_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
