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

# ==============================================================================
# STANDARD LIBRARY AND THIRD-PARTY IMPORTS
# ==============================================================================
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from mindgrid import __version__
from mindgrid.config import settings
from mindgrid.config.settings import debug_endpoints_enabled, validate_required_settings
from mindgrid.database.connection import close_pool, open_pool
from mindgrid.exceptions.errors import MindGridError
from mindgrid.exceptions.handlers import (
    general_exception_handler,
    http_exception_handler,
    mindgrid_error_handler,
    validation_exception_handler,
    value_error_handler,
)
from mindgrid.middleware.cors import setup_brotli_middleware, setup_cors_middleware
from mindgrid.routes import (
    ai_debug_router,
    ai_image_router,
    ai_mindmap_router,
    ai_suggestions_router,
    ai_text_analysis_router,
    ai_text_router,
    canvas_router,
    folders_router,
    health_router,
    pages_router,
    settings_router,
    upload_router,
)
from mindgrid.utils.debug import print__startup_debug


# ==============================================================================
# APPLICATION LIFESPAN MANAGEMENT
# ==============================================================================
@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Validate configuration and manage the database pool.

    Startup fails with RuntimeError when a required environment variable is
    missing. The pool is opened before requests are served and closed on
    shutdown.
    """
    settings._APP_STARTUP_TIME = datetime.now()
    print__startup_debug("🚀 MindGrid API starting up...")

    missing = validate_required_settings()
    if missing:
        raise RuntimeError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    await open_pool()
    print__startup_debug("✅ MindGrid API ready to serve requests")

    yield

    print__startup_debug("🛑 MindGrid API shutting down...")
    print__startup_debug(f"Application ran for {datetime.now() - settings._APP_STARTUP_TIME}")
    await close_pool()


# ==============================================================================
# FASTAPI APPLICATION INITIALIZATION
# ==============================================================================
def create_app() -> FastAPI:
    """Build the application.

    The ``/api/ai/debug`` diagnostics router is mounted only when
    ``MINDGRID_DEBUG_ENDPOINTS=1`` at build time.
    """
    application = FastAPI(
        title="MindGrid API",
        description="""Backend for MindGrid, a visual mind-mapping canvas.

## Features
- 🧠 Canvas creation, graph persistence and nested canvases
- 🤖 AI text, suggestions, analysis and image generation with your own OpenAI key
- 📎 Image uploads to Supabase Storage

## Authentication
Endpoints under `/api` (except `/health`) require a Supabase session, sent as
a Bearer token or the `sb-access-token` cookie.
        """,
        version=__version__,
        lifespan=lifespan,
    )

    # Middleware
    setup_cors_middleware(application)
    setup_brotli_middleware(application)

    # Exception handlers
    application.add_exception_handler(MindGridError, mindgrid_error_handler)
    application.add_exception_handler(RequestValidationError, validation_exception_handler)
    application.add_exception_handler(StarletteHTTPException, http_exception_handler)
    application.add_exception_handler(ValueError, value_error_handler)
    application.add_exception_handler(Exception, general_exception_handler)

    # Routers
    application.include_router(health_router, tags=["Health"])
    application.include_router(pages_router, tags=["Pages"], include_in_schema=False)
    application.include_router(canvas_router, tags=["Canvas"])
    application.include_router(folders_router, tags=["Folders"])
    application.include_router(settings_router, tags=["Settings"])
    application.include_router(upload_router, tags=["Upload"])
    application.include_router(ai_text_router, tags=["AI"])
    application.include_router(ai_image_router, tags=["AI"])
    application.include_router(ai_suggestions_router, tags=["AI"])
    application.include_router(ai_text_analysis_router, tags=["AI"])
    application.include_router(ai_mindmap_router, tags=["AI"])

    if debug_endpoints_enabled():
        print__startup_debug("⚠️ Debug endpoints enabled: /api/ai/debug is mounted")
        application.include_router(ai_debug_router, tags=["Debug"])

    return application


app = create_app()
