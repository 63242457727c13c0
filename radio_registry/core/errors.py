from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..schemas.radio import RadioOut

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


class RegistryError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(RegistryError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(RegistryError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(RegistryError):
    """A record with the same serial number already exists.

    ``existing`` holds the conflicting row so callers can offer to edit it.
    """

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str, existing: Any) -> None:
        super().__init__(message)
        self.existing = existing


class ErrorEnvelope(JSONResponse):
    def __init__(
        self,
        *,
        status_code: int,
        message: str,
        extra: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"error": message}
        if extra:
            payload.update(extra)
        super().__init__(payload, status_code=status_code, headers=headers)


async def registry_error_handler(request: Request, exc: RegistryError):
    extra = None
    if isinstance(exc, ConflictError):
        extra = {"existingRadio": RadioOut.model_validate(exc.existing).model_dump()}
    return ErrorEnvelope(status_code=exc.status_code, message=exc.message, extra=extra)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    message = detail if isinstance(detail, str) else "Error"
    return ErrorEnvelope(status_code=exc.status_code, message=message, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return ErrorEnvelope(
        status_code=status.HTTP_400_BAD_REQUEST,
        message="Validation failed",
        extra={"details": jsonable_errors(exc)},
    )


def rate_limit_handler(request: Request, exc):
    # slowapi calls this without awaiting when the endpoint is sync.
    retry_after = getattr(exc, "retry_after", None)
    headers = {"Retry-After": str(retry_after)} if retry_after else None
    return ErrorEnvelope(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        message=RATE_LIMIT_MESSAGE,
        headers=headers,
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return ErrorEnvelope(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="Internal server error",
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]
