from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class TodoError(Exception):
    """
    Base class for errors surfaced to API clients.

    Each subclass fixes the HTTP status; `message` is what the client sees in
    the `{"error": ...}` body.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(TodoError):
    """Request body is missing, empty, or carries nothing updatable."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(TodoError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Todo not found") -> None:
        super().__init__(message)


class StoreError(TodoError):
    """
    The store could not complete an operation.

    `action` names the operation ("create todo", "fetch todos", ...). Only the
    generic "Failed to <action>" text reaches the client; the underlying cause
    is chained and logged server side.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, action: str) -> None:
        super().__init__(f"Failed to {action}")
        self.action = action


async def todo_error_handler(request: Request, exc: TodoError) -> JSONResponse:
    if isinstance(exc, StoreError):
        logger.error(
            "Error during %s %s: %s",
            request.method,
            request.url.path,
            exc.message,
            exc_info=exc.__cause__ or exc,
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Malformed JSON bodies and non-integer ids are client errors (400).

    Response format:
        {
            "error": "Invalid request",
            "detail": [... pydantic/fastapi error details ...]
        }
    """
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request", "detail": jsonable_errors(exc)},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error during %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # pydantic may put the raw exception under ctx; keep only JSON-safe parts
    errors = []
    for err in exc.errors():
        item = {k: v for k, v in err.items() if k != "ctx"}
        if "ctx" in err:
            item["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
        errors.append(item)
    return errors


# PUBLIC_INTERFACE
def register_error_handlers(app: FastAPI) -> None:
    """Install the JSON error handlers on a FastAPI application."""
    app.add_exception_handler(TodoError, todo_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)
