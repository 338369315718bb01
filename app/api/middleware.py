"""
API middleware components.

Assigns a request ID for log correlation and negotiates the response language.
"""

import uuid

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from app.api.i18n import get_preferred_language
from app.core.logging import request_id_var


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Set the request ID and language for the request and echo them in the
    ``X-Request-ID`` and ``Content-Language`` response headers.

    An incoming ``X-Request-ID`` header is reused.
    """

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request_id_token = request_id_var.set(request_id)

        language = get_preferred_language(request)

        try:
            logger.bind(method=request.method, path=request.url.path, language=language.value).info(
                f"Request {request.method} {request.url.path}"
            )

            response = await call_next(request)
        finally:
            request_id_var.reset(request_id_token)

        response.headers["X-Request-ID"] = request_id
        response.headers["Content-Language"] = language.value
        return response


def get_request_id() -> str:
    """
    ID of the current request, or an empty string outside a request.
    """
    request_id = request_id_var.get()
    return request_id if request_id is not None else ""
