"""
Middleware package for the MindGrid backend.

CORS and response compression setup.
"""

from .cors import setup_brotli_middleware, setup_cors_middleware

__all__ = ["setup_brotli_middleware", "setup_cors_middleware"]
