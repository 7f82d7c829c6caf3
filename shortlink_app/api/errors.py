"""
Exception handlers translating domain errors to HTTP responses.

Body shape is always ``{"detail": "<message>"}`` so clients can surface the
message as-is.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shortlink_app.errors import AuthError, ShortlinkError

logger = logging.getLogger(__name__)


async def shortlink_error_handler(request: Request, exc: ShortlinkError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or missing request fields are a 400, not FastAPI's default 422"""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request: " + "; ".join(problems)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ShortlinkError, shortlink_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
