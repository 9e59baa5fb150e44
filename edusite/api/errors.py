"""Exception handlers: AppError taxonomy, routing errors and request validation rendered as {"success": false, "message": ...}."""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from edusite.api.cookies import clear_session_cookie
from edusite.core.errors import AppError, InternalError, ValidationError

logger = logging.getLogger(__name__)


def _render(
    request: Request,
    status_code: int,
    content: dict[str, Any],
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    response = JSONResponse(
        status_code=status_code,
        content=content,
        headers=headers,
    )
    if getattr(request.state, "clear_session_cookie", False):
        clear_session_cookie(response)
    return response


def _render_error(request: Request, error: AppError) -> JSONResponse:
    return _render(request, error.status_code, error.to_dict())


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info(
            "%s %s -> %s: %s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.message,
        )
    return _render_error(request, exc)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes (404), wrong methods (405) and other framework-raised HTTP errors."""
    # Keep headers such as Allow on 405.
    content = {"success": False, "message": str(exc.detail)}
    return _render(request, exc.status_code, content, headers=getattr(exc, "headers", None))


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Body/params that fail schema validation are a 400, reported by their first error."""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        loc = [str(part) for part in first.get("loc", ()) if part != "body"]
        message = f"{'.'.join(loc)}: {first.get('msg')}" if loc else str(first.get("msg"))
    return _render_error(request, ValidationError(message))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _render_error(request, InternalError())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
