"""Helper functions for error handling and response formatting."""

# API helper functions for error handling and response formatting
import os
import traceback

from fastapi.responses import JSONResponse

from mindgrid.exceptions.errors import MindGridError
from mindgrid.exceptions.handlers import GENERIC_ERROR_MESSAGE
from mindgrid.utils.debug import print__debug


# ==============================================================================
# ERROR RESPONSE HELPERS
# ==============================================================================
def traceback_json_response(e, status_code=500, **extra):
    """Create a JSON response with traceback information when in debug mode.

    When DEBUG_TRACEBACK=1 the response carries the exception message and the
    full stack trace. Otherwise returns None so the caller falls back to a
    safe production response.

    Args:
        e: The exception that occurred
        status_code: HTTP status code for the response (default: 500)
        **extra: Additional non-None fields to include (e.g. canvas_id)

    Returns:
        JSONResponse in debug mode, None otherwise.
    """
    if os.environ.get("DEBUG_TRACEBACK") == "1":
        tb_str = "".join(traceback.format_exception(type(e), e, e.__traceback__))
        response_content = {"error": str(e), "traceback": tb_str}
        response_content.update({k: v for k, v in extra.items() if v is not None})
        return JSONResponse(status_code=status_code, content=response_content)

    return None


def unexpected_error_response(e, context: str, **extra):
    """Outer-boundary conversion of an unexpected exception into a flat 500.

    MindGridError instances are re-raised so the registered handler renders
    them with their own status code.
    """
    if isinstance(e, MindGridError):
        raise e

    print__debug(f"🚨 Unexpected error in {context}: {type(e).__name__}: {str(e)}")
    print__debug(f"🚨 {context} traceback: {traceback.format_exc()}")
    resp = traceback_json_response(e, **extra)
    if resp:
        return resp
    return JSONResponse(status_code=500, content={"error": GENERIC_ERROR_MESSAGE})
