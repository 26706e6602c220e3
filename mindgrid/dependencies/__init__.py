"""
Dependencies package for the MindGrid backend.

This package contains FastAPI dependencies for authentication.
"""

# Import authentication dependencies
from .auth import extract_session_token, get_current_user, get_optional_user

# Export all dependencies for easier access
__all__ = ["extract_session_token", "get_current_user", "get_optional_user"]
