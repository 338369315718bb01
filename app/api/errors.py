"""
API error handling for consistent error responses across the application.
"""

from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.api.i18n import get_preferred_language
from app.api.middleware import get_request_id
from app.api.responses import ResponseMessage
from app.core.exceptions import CatalogError


def create_error_response(message: str, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Create a standardized error body.
    """
    body: Dict[str, Any] = {"detail": message}
    if extra:
        body.update(extra)
    return body


def translate(request: Request, message_key: str, placeholders: Optional[Dict[str, str]] = None) -> str:
    """
    Render ``message_key`` in the language requested by ``request``.
    """
    language = get_preferred_language(request)
    return ResponseMessage(message_key, placeholders).translate(language.value)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers for the FastAPI application.
    """

    @app.exception_handler(CatalogError)
    async def catalog_exception_handler(request: Request, exc: CatalogError) -> JSONResponse:
        """
        Render a domain error in the caller's language.
        """
        logger.bind(error=exc.message_key, **exc.placeholders).warning(
            f"{request.method} {request.url.path} rejected: {exc.message_key}"
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=create_error_response(translate(request, exc.message_key, exc.placeholders), exc.extra_content()),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Handle validation errors and return a standardized response.
        """
        logger.warning(f"Validation error: {exc.errors()}")

        def flatten_error(err: dict) -> str:
            location = ".".join(str(loc) for loc in err.get("loc", []))
            message = err.get("msg", "Validation error")
            return f"{location}: {message}"

        flat_errors = [flatten_error(err) for err in exc.errors()]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=create_error_response(" | ".join(flat_errors)),
        )

    @app.exception_handler(IntegrityError)
    async def integrity_exception_handler(request: Request, exc: IntegrityError) -> JSONResponse:
        """
        Handle database integrity errors not anticipated by the services.
        """
        logger.error(f"Database integrity error (request {get_request_id()}): {str(exc)}")
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=create_error_response(translate(request, "IntegrityConflict")),
        )

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        """
        Handle general SQLAlchemy errors.
        """
        logger.error(f"Database error (request {get_request_id()}): {str(exc)}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=create_error_response(translate(request, "DatabaseError")),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Handle all other uncaught exceptions.
        """
        logger.exception(f"Unhandled exception: {str(exc)}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=create_error_response(translate(request, "InternalError")),
        )
