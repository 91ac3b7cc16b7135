import logging
import traceback
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cafe_pos.request_id import REQUEST_ID_HEADER, bound_request_id, request_id_for

logger = logging.getLogger(__name__)


def _error_response(
    exc: Exception,
    status_code: int,
    message: str,
    expose_stack: bool,
    request_id: Optional[str] = None,
) -> JSONResponse:
    stack = None
    if expose_stack:
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    headers = dict(getattr(exc, "headers", None) or {})
    if request_id:
        headers[REQUEST_ID_HEADER] = request_id
    return JSONResponse(
        status_code=status_code,
        content={"message": message, "stack": stack},
        headers=headers or None,
    )


def install_error_handlers(app: FastAPI, production: bool) -> None:
    """Register the last-resort handlers that turn failures into JSON.

    A failure's own ``status_code`` wins; anything without one is a 500.
    Stack traces are only returned outside production.
    """

    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error_response(exc, exc.status_code, str(exc.detail), expose_stack=not production)

    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        # Runs outside RequestIDMiddleware, so the id is re-bound from the request.
        rid = request_id_for(request)
        status_code = getattr(exc, "status_code", None) or 500
        message = str(exc) or "Internal Server Error"
        with bound_request_id(rid):
            if status_code >= 500:
                logger.error("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return _error_response(exc, status_code, message, expose_stack=not production, request_id=rid)

    app.add_exception_handler(StarletteHTTPException, http_error)
    app.add_exception_handler(Exception, unhandled_error)
