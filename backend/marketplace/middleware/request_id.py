"""
GoEveryWork Marketplace — Request ID Middleware
=================================================

What:  Tags every request with a short correlation ID, exposes it to loggers
       through a ContextVar and returns it in the X-Request-ID header.
Why:   Error bodies carry the same ID, so a user report can be matched to the
       server log lines of that request.

A client-supplied X-Request-ID (e.g. generated by the frontend) is reused as is.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Coroutine-local: concurrent requests on the same thread keep separate values
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
