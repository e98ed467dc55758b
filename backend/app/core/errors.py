"""Mapping from internal failures to the client-facing error envelope.

Routes raise; they never build error responses. Every exception that
reaches the application boundary goes through ``to_api_error`` and is
rendered as ``{"error": {"code", "message", "details"}}``.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.validation import FieldError, ValidationFailedError
from app.repositories.exceptions import DatabaseError, RecordNotFoundError
from app.schemas.error import APIError
from app.services.entity_service import EntityNotFoundError

logger = logging.getLogger(__name__)


ENTITY_NOT_FOUND = APIError(
    code=status.HTTP_404_NOT_FOUND,
    message="Entity not found",
    details="The requested entity could not be found",
)
INVALID_REQUEST = APIError(
    code=status.HTTP_400_BAD_REQUEST,
    message="Invalid request",
    details="The request body is invalid or missing required fields",
)
DATABASE_ERROR = APIError(
    code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    message="Database error",
    details="An error occurred while accessing the database",
)
VALIDATION_ERROR = APIError(
    code=status.HTTP_400_BAD_REQUEST,
    message="Validation error",
    details="The request data failed validation",
)


def validation_error(errors: list[FieldError]) -> APIError:
    if not errors:
        return VALIDATION_ERROR
    return VALIDATION_ERROR.model_copy(update={"message": "; ".join(str(e) for e in errors)})


def to_api_error(exc: BaseException) -> APIError:
    if isinstance(exc, RequestValidationError):
        return INVALID_REQUEST
    if isinstance(exc, ValidationFailedError):
        return validation_error(exc.errors)
    if isinstance(exc, (EntityNotFoundError, RecordNotFoundError)):
        return ENTITY_NOT_FOUND
    if isinstance(exc, (DatabaseError, SQLAlchemyError)):
        return DATABASE_ERROR
    # Unrecognised failures.
    return DATABASE_ERROR


def error_response(api_error: APIError) -> JSONResponse:
    return JSONResponse(
        status_code=api_error.code,
        content={"error": api_error.model_dump(exclude_none=True)},
    )


async def api_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    api_error = to_api_error(exc)
    if api_error.code >= 500:
        logger.error("%s %s failed: %r", request.method, request.url.path, exc)
    return error_response(api_error)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Routing-level errors (unknown path, wrong method) keep their status.
    api_error = APIError(code=exc.status_code, message=str(exc.detail))
    return error_response(api_error)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    response = error_response(to_api_error(exc))
    # Runs outside the observability middleware, so the id is copied here.
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        response.headers["X-Request-ID"] = request_id
    return response


def register_exception_handlers(app: FastAPI) -> None:
    for exc_class in (
        RequestValidationError,
        ValidationFailedError,
        EntityNotFoundError,
        RecordNotFoundError,
        DatabaseError,
        SQLAlchemyError,
    ):
        app.add_exception_handler(exc_class, api_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
