"""Translate domain exceptions into JSON error responses"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tip_gateway.config import Settings
from tip_gateway.domain.exceptions import (
    CalculationNotFoundError,
    InvalidInputError,
    StorageUnavailableError,
)

INVALID_INPUT_MESSAGE = "billAmount, tipPercent, and numberOfPeople are required and must be valid numbers"


def error_response(status_code: int, error: str, message: str | None = None) -> JSONResponse:
    content = {"error": error}
    if message is not None:
        content["message"] = message
    return JSONResponse(status_code=status_code, content=content)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def server_error_response(request: Request, exc: Exception, settings: Settings) -> JSONResponse:
    """Log and answer an opaque 500; detail only in development"""
    logging.error(f"Unhandled error: {exc!r}", extra={"request_id": _request_id(request), "path": request.url.path})
    return error_response(
        500,
        "Internal server error",
        str(exc) if settings.is_development else None,
    )


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """
    Map InvalidInput -> 400, NotFound -> 404, storage -> 500.

    Other exceptions are turned into 500s by UnhandledErrorMiddleware in
    api/middleware.py so the response still passes through request-id and
    CORS middleware.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        logging.warning("Request validation failed", extra={"request_id": _request_id(request), "errors": str(exc.errors())})
        return error_response(400, "Invalid input", INVALID_INPUT_MESSAGE)

    @app.exception_handler(InvalidInputError)
    async def handle_invalid_input(request: Request, exc: InvalidInputError):
        logging.warning(f"Invalid input: {exc}", extra={"request_id": _request_id(request)})
        return error_response(400, "Invalid input", str(exc))

    @app.exception_handler(CalculationNotFoundError)
    async def handle_not_found(request: Request, exc: CalculationNotFoundError):
        return error_response(404, "Calculation not found")

    @app.exception_handler(StorageUnavailableError)
    async def handle_storage_unavailable(request: Request, exc: StorageUnavailableError):
        return server_error_response(request, exc, settings)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        error = "Route not found" if exc.status_code == 404 else str(exc.detail)
        response = error_response(exc.status_code, error)
        if exc.headers:
            response.headers.update(exc.headers)
        return response
