"""
Exception Handlers
==================
Translate errors into JSON `{message}` responses.
"""
import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from healthmonitor.errors import HealthMonitorError

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    """First violation as a readable sentence."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    error = errors[0]
    message = error.get("msg", "Invalid request")
    if message.startswith("Value error, "):
        return message[len("Value error, "):]
    location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    return f"{'.'.join(location)}: {message}" if location else message


def register_exception_handlers(app: FastAPI, debug: bool = False) -> None:
    """Install handlers. `debug` exposes internal error detail and stack traces."""

    @app.exception_handler(HealthMonitorError)
    async def _domain_error(request: Request, exc: HealthMonitorError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}", exc_info=exc.__cause__)
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"message": _validation_message(exc)})

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def _unhandled_error(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        if debug:
            stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
            return JSONResponse(status_code=500, content={"message": str(exc), "stack": stack})
        return JSONResponse(status_code=500, content={"message": "Internal Server Error"})
