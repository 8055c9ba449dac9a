"""
DiscoverHealth Backend — Request ID Middleware
================================================

What:  Assigns an ID to each incoming request and returns it in X-Request-ID.
How:   Uses the client's X-Request-ID when present, otherwise a short UUID.
       The value is stored in a ContextVar for loggers and exception handlers
       and in request.state for route handlers.
When:  Runs before the access log and session middleware.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one thread each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Client-supplied IDs longer than this are replaced
MAX_REQUEST_ID_LENGTH = 64


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that assigns a unique ID to each request for tracing.

    Behavior:
        1. Check if client sent X-Request-ID header
        2. If present and reasonably short: use it
        3. Otherwise: generate an 8-character ID
        4. Store in ContextVar and request.state
        5. Add to response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID", "")
        if not rid or len(rid) > MAX_REQUEST_ID_LENGTH:
            rid = str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
