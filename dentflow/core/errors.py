# dentflow/core/errors.py
import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    headers = getattr(exc, "headers", None)
    response = _error(exc.status_code, str(exc.detail))
    if headers:
        response.headers.update(headers)
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = jsonable_encoder(exc.errors())
    first = errors[0] if errors else {}
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{loc}: {first.get('msg')}" if loc else str(first.get("msg", "Invalid request"))
    logger.info(f"{request.method} {request.url.path} -> 422: {message}")
    return _error(422, message, errors=errors)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} integrity error: {exc.orig}")
    return _error(status.HTTP_409_CONFLICT, "Record conflicts with existing data")


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} database error: {exc}", exc_info=True)
    return _error(status.HTTP_400_BAD_REQUEST, str(exc.__class__.__name__))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.critical(
        f"Unhandled exception on {request.method} {request.url.path}: {exc.__class__.__name__} - {exc}",
        exc_info=True,
    )
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
