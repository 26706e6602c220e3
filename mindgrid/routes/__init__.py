"""
Routes package for the MindGrid backend.

This package contains FastAPI route handlers for the AI proxy, canvas,
folder, settings and upload APIs, the server-rendered pages and health checks.
"""

# Routes module initialization
from .ai_debug import router as ai_debug_router
from .ai_image import router as ai_image_router
from .ai_mindmap import router as ai_mindmap_router
from .ai_suggestions import router as ai_suggestions_router
from .ai_text import router as ai_text_router
from .ai_text_analysis import router as ai_text_analysis_router
from .canvas import router as canvas_router
from .folders import router as folders_router
from .health import router as health_router
from .pages import router as pages_router
from .settings import router as settings_router
from .upload import router as upload_router

# Export all routers for easy import
__all__ = [
    "ai_debug_router",
    "ai_image_router",
    "ai_mindmap_router",
    "ai_suggestions_router",
    "ai_text_router",
    "ai_text_analysis_router",
    "canvas_router",
    "folders_router",
    "health_router",
    "pages_router",
    "settings_router",
    "upload_router",
]
