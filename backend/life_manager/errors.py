"""Domain errors and the handlers that render them as `{"message": ...}` bodies."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


class LifeManagerError(Exception):
    """Base error; carries the HTTP status and client-facing message."""

    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(LifeManagerError, ValueError):
    status_code = 400
    default_message = "Invalid request"


class InvalidAmount(ValidationFailed):
    default_message = "Invalid amount"


class DuplicateUser(LifeManagerError):
    status_code = 400
    default_message = "User already exists"


class InvalidCredentials(LifeManagerError):
    # Same message for unknown email and wrong password.
    status_code = 400
    default_message = "Invalid email or password"


class MissingToken(LifeManagerError):
    status_code = 401
    default_message = "Token required"


class InvalidToken(LifeManagerError):
    status_code = 403
    default_message = "Invalid token"


class NotFound(LifeManagerError, LookupError):
    status_code = 404
    default_message = "Not found"


def _message_response(status_code: int, message: Any, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, **extra})


async def _domain_error_handler(_: Request, exc: LifeManagerError) -> JSONResponse:
    return _message_response(exc.status_code, exc.message)


async def _validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    return _message_response(400, "Invalid request", errors=jsonable_encoder(errors))


async def _http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LifeManagerError, _domain_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
