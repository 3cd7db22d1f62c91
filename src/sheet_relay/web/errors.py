"""Mapping of service errors to JSON responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from sheet_relay.exceptions import SheetRelayError
from sheet_relay.google.exceptions import GoogleAuthError

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    message: str,
    error: Exception | str | None = None,
) -> JSONResponse:
    """Build a ``{message, error?}`` JSON response."""
    content = {"message": message}
    if error is not None:
        content["error"] = str(error)
    return JSONResponse(status_code=status_code, content=content)


async def handle_relay_error(request: Request, exc: SheetRelayError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return error_response(exc.status_code, str(exc))


async def handle_google_auth_error(request: Request, exc: GoogleAuthError) -> JSONResponse:
    logger.error(f"Google authentication failed on {request.url.path}: {exc}")
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Google authentication is not available.",
        exc,
    )


async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Invalid request.", "error": jsonable_encoder(exc.errors())},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SheetRelayError, handle_relay_error)
    app.add_exception_handler(GoogleAuthError, handle_google_auth_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
