"""RFC 7807 problem responses for every error the API returns."""

import logging
import traceback
from http import HTTPStatus
from typing import Any, Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse

from reportdesk.domain.errors import DomainError, ErrorKind

logger = logging.getLogger("reportdesk.api")

PROBLEM_MEDIA_TYPE = "application/problem+json"

_RFC7231 = "https://tools.ietf.org/html/rfc7231#section-"
PROBLEM_TYPES: dict[int, str] = {
    400: _RFC7231 + "6.5.1",
    404: _RFC7231 + "6.5.4",
    405: _RFC7231 + "6.5.5",
    409: _RFC7231 + "6.5.8",
    501: _RFC7231 + "6.6.2",
    503: _RFC7231 + "6.6.4",
    507: "https://tools.ietf.org/html/rfc4918#section-11.5",
}

KIND_STATUS: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.VALIDATION: 422,
    ErrorKind.INSUFFICIENT_STORAGE: 507,
    ErrorKind.NOT_IMPLEMENTED: 501,
    ErrorKind.UPSTREAM_UNAVAILABLE: 503,
}


def problem_type(status: int) -> str:
    return PROBLEM_TYPES.get(status, f"https://httpstatuses.com/{status}")


def problem_response(
    request: Request,
    status: int,
    detail: str,
    title: Optional[str] = None,
    errors: Optional[list[dict[str, str]]] = None,
) -> JSONResponse:
    body: dict[str, Any] = {
        "type": problem_type(status),
        "title": title or HTTPStatus(status).phrase,
        "status": status,
        "detail": detail,
        "instance": str(request.url.path),
    }
    if errors is not None:
        body["errors"] = errors
    return JSONResponse(status_code=status, content=body, media_type=PROBLEM_MEDIA_TYPE)


def _field_path(loc: tuple) -> str:
    # drop the "body" / "query" / "path" / "header" prefix
    parts = loc[1:] if len(loc) > 1 else loc
    return ".".join(str(p) for p in parts)


def register_exception_handlers(app: FastAPI, debug: bool = False) -> None:
    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        return problem_response(request, KIND_STATUS[exc.kind], exc.detail)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [{"path": _field_path(tuple(e.get("loc", ()))), "message": e.get("msg", "")} for e in exc.errors()]
        return problem_response(request, 422, "Request validation failed", title="Validation Error", errors=errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return problem_response(request, exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
        logger.error("Unhandled error on %s %s:\n%s", request.method, request.url.path, "".join(tb))
        detail = str(exc) if debug else "An unexpected error occurred"
        return problem_response(request, 500, detail, title="Internal Server Error")
