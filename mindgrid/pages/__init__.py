"""
Pages package for the MindGrid backend.

HTML rendering for the landing, auth and dashboard pages.
"""

from .markup import (
    render_auth_error,
    render_dashboard,
    render_landing,
    render_login,
    render_new_canvas_form,
)

__all__ = [
    "render_auth_error",
    "render_dashboard",
    "render_landing",
    "render_login",
    "render_new_canvas_form",
]
