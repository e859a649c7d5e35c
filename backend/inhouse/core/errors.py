"""
Gateway error taxonomy and the FastAPI handlers that render it
"""
from contextlib import contextmanager
from typing import Any, Iterator

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from inhouse.utils.logger import logger
from inhouse.utils.serialization import to_jsonable


class GatewayError(Exception):
    """Base class for errors surfaced to HTTP clients"""

    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(GatewayError):
    """Malformed input: bad identifier, bad resource name or missing body"""

    status_code = 400


class InvalidIdentifier(ValidationError):
    def __init__(self, value: Any = None):
        super().__init__(
            "ID must be a single String of 12 bytes or a string of 24 hex characters"
        )
        self.value = value


class NotFound(GatewayError):
    status_code = 404


class StoreError(GatewayError):
    """
    Any failure raised by the backing store.

    The driver's error details are passed through to the client untouched.
    """

    status_code = 500

    def __init__(self, cause: PyMongoError):
        super().__init__(str(cause))
        self.cause = cause

    @property
    def details(self) -> Any:
        details = getattr(self.cause, "details", None)
        if details:
            return details
        return {"name": type(self.cause).__name__, "message": str(self.cause)}


@contextmanager
def store_errors() -> Iterator[None]:
    """Re-raise driver failures as StoreError"""
    try:
        yield
    except PyMongoError as exc:
        raise StoreError(exc) from exc


async def validation_error_handler(request: Request, exc: ValidationError) -> Response:
    if not exc.message:
        return Response(status_code=exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": True, "message": exc.message},
    )


async def not_found_handler(request: Request, exc: NotFound) -> Response:
    return Response(status_code=exc.status_code)


async def store_error_handler(request: Request, exc: StoreError) -> Response:
    logger.error(
        f"Store error on {request.method} {request.url.path}: {exc.message}",
        exc_info=exc.cause,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=to_jsonable(exc.details),
    )


async def pymongo_error_handler(request: Request, exc: PyMongoError) -> Response:
    # Driver errors that escaped a service call are still store errors
    return await store_error_handler(request, StoreError(exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(NotFound, not_found_handler)
    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(PyMongoError, pymongo_error_handler)
