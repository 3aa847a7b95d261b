"""Error Handlers — every failure leaves the app as a BloxMarketError envelope.

Invariants:
    - BloxMarketError keeps its own http_status and to_response() body
    - RequestValidationError is converted to the domain ValidationError, so request
      bodies and repository inputs fail with the same envelope shape
    - Anything else becomes INTERNAL_ERROR (500) and never leaks exception text

Design Decisions:
    - One responder for all three handlers: the envelope is built in core/errors.py
    - 4xx logged at WARNING, 5xx at ERROR
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from bloxmarket.core.errors import (
    BloxMarketError, ErrorCategory, ErrorSeverity, ValidationError,
)

logger = logging.getLogger(__name__)


class InternalError(BloxMarketError):
    """Stand-in for an exception the domain did not anticipate."""
    def __init__(self):
        super().__init__(
            "An unexpected error occurred", "INTERNAL_ERROR",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL, http_status=500,
        )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BloxMarketError, _on_domain_error)
    app.add_exception_handler(RequestValidationError, _on_request_validation)
    app.add_exception_handler(Exception, _on_unhandled)


def _respond(request: Request, exc: BloxMarketError) -> JSONResponse:
    log = logger.error if exc.http_status >= 500 else logger.warning
    log(
        f"{exc.code}: {exc.message}",
        extra={
            "error_code": exc.code,
            "path": request.url.path,
            "entity": exc.context.entity,
            "entity_id": exc.context.entity_id,
        },
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def _on_domain_error(request: Request, exc: BloxMarketError) -> JSONResponse:
    return _respond(request, exc)


async def _on_request_validation(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    return _respond(request, request_validation_to_domain(exc))


async def _on_unhandled(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.url.path}",
        exc_info=exc,
        extra={"path": request.url.path},
    )
    return _respond(request, InternalError())


def request_validation_to_domain(exc: RequestValidationError) -> ValidationError:
    details = [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    first = details[0] if details else {"field": "__root__", "message": "invalid"}
    return ValidationError(
        f"{first['field']}: {first['message']}", first["field"], details,
    )
