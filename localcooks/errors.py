# localcooks/errors.py
"""
Problem+json error rendering.

Every error leaving the API has the same body, whichever layer raised it:

    {"type", "title", "status", "detail", "instance", "code"?, "errors"?}

``detail`` is always the human message the SPA shows in its toast, ``code``
is the machine-readable reason and ``errors`` carries structured details
(missing videos, the offending field, the current checkout status).
"""

from http import HTTPStatus
import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.exceptions import DomainException
from .monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"


def _status_title(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def _split_detail(detail: Any) -> Tuple[str, Optional[str], Any]:
    """Return ``(message, code, errors)`` from an HTTPException detail.

    Domain exceptions arrive as ``{"message", "code", "details"}`` dicts;
    FastAPI's own errors are plain strings.
    """
    if isinstance(detail, dict):
        message = detail.get("message") or detail.get("detail") or ""
        code = detail.get("code")
        return (
            message if isinstance(message, str) else str(message),
            code if isinstance(code, str) else None,
            detail.get("details") or detail.get("errors"),
        )
    if detail is None:
        return "", None, None
    return str(detail), None, None


def problem_response(
    request: Request,
    status_code: int,
    message: str,
    code: Optional[str] = None,
    errors: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body: Dict[str, Any] = {
        "type": "about:blank",
        "title": _status_title(status_code),
        "status": status_code,
        "detail": message,
        "instance": request.url.path,
    }
    if code:
        body["code"] = code
    if errors:
        body["errors"] = jsonable_encoder(errors)
    prometheus_metrics.record_http_error(status_code, code or "none")
    return JSONResponse(body, status_code=status_code, media_type=PROBLEM_MEDIA_TYPE, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    """Attach the problem+json handlers to the app."""

    async def _from_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message, code, errors = _split_detail(exc.detail)
        return problem_response(
            request, exc.status_code, message, code, errors, getattr(exc, "headers", None)
        )

    app.add_exception_handler(HTTPException, _from_http_exception)
    app.add_exception_handler(StarletteHTTPException, _from_http_exception)

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        # Services called outside a route's try/except still map cleanly
        return problem_response(request, exc.status_code, exc.message, exc.code, exc.details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return problem_response(
            request, 422, "Request validation failed", "validation_error", exc.errors()
        )

    @app.exception_handler(ValidationError)
    async def response_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
        logger.error(f"Model validation failed on {request.url.path}: {exc}")
        return problem_response(request, 422, "Validation failed", "validation_error", exc.errors())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return problem_response(request, 500, "Internal Server Error", "internal_server_error")
