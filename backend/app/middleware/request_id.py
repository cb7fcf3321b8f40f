"""
PetHaven Backend — Request ID Middleware
==========================================

What:  Tags every request with a short correlation ID and echoes it back in
       the X-Request-ID response header.
Why:   Error payloads and log lines carry the same ID, so an operator can go
       from a failed status change reported by the frontend straight to the
       server log entry with the application and pet ids.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reuses a client-supplied X-Request-ID, otherwise generates an 8-char one."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        request_id_var.set(rid)
        request.state.request_id = rid
        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
