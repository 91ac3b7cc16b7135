import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

_rid_ctx: ContextVar[str] = ContextVar("request_id", default="")


def get_request_id() -> str:
    rid = _rid_ctx.get()
    if not rid:
        rid = f"req_{uuid.uuid4().hex}"
        _rid_ctx.set(rid)
    return rid


@contextmanager
def bound_request_id(rid: str) -> Iterator[str]:
    token = _rid_ctx.set(rid)
    try:
        yield rid
    finally:
        _rid_ctx.reset(token)


def request_id_for(request: Request) -> str:
    """Id of the request being served, also outside the middleware's context."""
    return getattr(request.state, "request_id", None) or request.headers.get(REQUEST_ID_HEADER) or get_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, header_name: str = REQUEST_ID_HEADER):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get(self.header_name) or f"req_{uuid.uuid4().hex}"
        # Kept on the scope so last-resort error handlers can still find it.
        request.state.request_id = rid
        with bound_request_id(rid):
            response: Response = await call_next(request)
        response.headers.setdefault(self.header_name, rid)
        return response
