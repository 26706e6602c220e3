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
from brotli_asgi import BrotliMiddleware
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mindgrid.utils.debug import print__startup_debug

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:8000"


# ==============================================================================
# MIDDLEWARE SETUP FUNCTIONS
# ==============================================================================
def get_allowed_origins():
    """Comma-separated ``CORS_ALLOWED_ORIGINS``, defaulting to the local dev servers."""
    allowed_origins_str = os.getenv("CORS_ALLOWED_ORIGINS", DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in allowed_origins_str.split(",") if origin.strip()]


def setup_cors_middleware(app: FastAPI):
    """Configure CORS for the browser canvas editor.

    Credentials are allowed because the session travels as the
    ``sb-access-token`` cookie or an Authorization header. PATCH is needed
    for canvas rename.
    """
    allowed_origins = get_allowed_origins()
    print__startup_debug(f"📋 CORS allowed origins: {allowed_origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )


def setup_brotli_middleware(app: FastAPI):
    """Compress responses of 1000 bytes or more (canvas graphs, page HTML)."""
    print__startup_debug("📋 Registering Brotli compression middleware...")
    app.add_middleware(BrotliMiddleware, minimum_size=1000)
