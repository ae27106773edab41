from contextlib import contextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.utils.log import get_logger

log = get_logger("storefront")

NOT_FOUND = "Product not found"
METHOD_NOT_ALLOWED = "Method not allowed"
INTERNAL_FAILURE = "Failed to process request"


class InternalFailure(Exception):
    """Any store-level failure; the detail is logged, never returned."""
    pass


@contextmanager
def store_failures(action: str):
    """Re-raise store errors and rejected payloads raised inside the block as InternalFailure."""
    try:
        yield
    except (SQLAlchemyError, ValidationError) as e:
        raise InternalFailure(f"{action}: {e}") from e


def error_response(status_code: int, message: str, headers: dict = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        return error_response(405, METHOD_NOT_ALLOWED)
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    log.error(f"{request.method} {request.url.path} rejected payload: {exc.errors()}")
    return error_response(500, INTERNAL_FAILURE)


async def internal_failure_handler(request: Request, exc: InternalFailure):
    log.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc.__cause__ or exc)
    return error_response(500, INTERNAL_FAILURE)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(InternalFailure, internal_failure_handler)
