"""
Notely Backend — Request ID Middleware
=======================================

What:  Assigns a short correlation id to each request and echoes it back.
How:   Uses the client's X-Request-ID when present, otherwise generates one;
       stores it in a ContextVar for loggers and error handlers and returns
       it in the X-Request-ID response header.
When:  Outermost application middleware, so every log line and error body
       of the request carries the same id.

Unexpected errors:
    Starlette answers unhandled exceptions in ServerErrorMiddleware, which
    sits outside this middleware, after the id has been reset. Anything
    that escapes the app is therefore answered here, while the id is still
    known.
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    # 8 hex chars are plenty for correlating log lines
    return uuid.uuid4().hex[:8]


def error_body(error: str, message: str, details: Optional[dict] = None) -> dict:
    """Structured error payload shared by every error response."""
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def unexpected_error_response() -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content=error_body(
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        ),
    )


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Take X-Request-ID from the client, or generate one
        2. Store it in request_id_var and request.state.request_id
        3. Turn any exception escaping the app into a structured 500
        4. Add the id to the response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or new_request_id()

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "[%s] Unexpected error on %s %s: %s",
                rid,
                request.method,
                request.url.path,
                str(e),
                exc_info=True,
            )
            response = unexpected_error_response()
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
