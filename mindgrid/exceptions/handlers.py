# CRITICAL: Set Windows event loop policy FIRST, before any other imports
# This must be the very first thing that happens to fix psycopg compatibility
import os
import sys

if sys.platform == "win32":
    import asyncio

    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Load environment variables early
from dotenv import load_dotenv

load_dotenv()

# Standard imports
import traceback

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mindgrid.exceptions.errors import MindGridError
from mindgrid.utils.debug import print__debug

GENERIC_ERROR_MESSAGE = "An unexpected error occurred"


# ==============================================================================
# EXCEPTION HANDLERS
# ==============================================================================
async def mindgrid_error_handler(request: Request, exc: MindGridError):
    """Render a MindGridError as ``{"error": message}`` with its status code.

    Authentication failures get extra request context in the debug log since
    they are the most common production support question.
    """
    if exc.status_code == 401:
        client_ip = request.client.host if request.client else "unknown"
        print__debug(
            f"🚨 HTTP 401 UNAUTHORIZED: {exc.message} ({request.method} {request.url.path} from {client_ip})"
        )
    else:
        print__debug(
            f"🚨 {type(exc).__name__} {exc.status_code}: {exc.message} ({request.method} {request.url.path})"
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors with proper 422 status code.

    Uses jsonable_encoder so that error contexts holding exceptions still
    serialize; falls back to a reduced error list if that fails.
    """
    print__debug(f"Validation error: {exc.errors()}")
    try:
        payload = {
            "error": "Validation error",
            "detail": "Validation error",
            "errors": exc.errors(),
        }
        return JSONResponse(status_code=422, content=jsonable_encoder(payload))
    except Exception as encoding_error:  # pylint: disable=broad-except
        print__debug(
            f"🚨 Validation encoding failure: {type(encoding_error).__name__}: {encoding_error}"
        )
        simple_errors = [
            {"msg": e.get("msg"), "loc": e.get("loc"), "type": e.get("type")}
            for e in exc.errors()
        ]
        return JSONResponse(
            status_code=422,
            content={
                "error": "Validation error",
                "detail": "Validation error",
                "errors": simple_errors,
            },
        )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions raised by FastAPI/Starlette (404, 405, ...)."""
    if exc.status_code >= 400:
        print__debug(
            f"🚨 HTTP {exc.status_code} ERROR: {exc.detail} ({request.method} {request.url.path})"
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def value_error_handler(_request: Request, exc: ValueError):
    """Handle ValueError exceptions as 400 Bad Request."""
    print__debug(f"ValueError: {str(exc)}")
    return JSONResponse(status_code=400, content={"error": str(exc)})


async def general_exception_handler(_request: Request, exc: Exception):
    """Handle unexpected exceptions (500 Internal Server Error).

    Behavior:
    - Development (DEBUG_TRACEBACK=1): include the full traceback in the response
    - Production: flat, non-specific message; details only in the debug log
    """
    if os.getenv("DEBUG_TRACEBACK", "0") == "1":
        tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        print__debug(
            f"Unexpected error (with traceback): {type(exc).__name__}: {str(exc)}\n{tb}"
        )
        return JSONResponse(
            status_code=500, content={"error": str(exc), "traceback": tb}
        )

    print__debug(f"Unexpected error: {type(exc).__name__}: {str(exc)}")
    return JSONResponse(status_code=500, content={"error": GENERIC_ERROR_MESSAGE})
