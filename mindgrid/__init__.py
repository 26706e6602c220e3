"""
MindGrid backend package.

This package contains the FastAPI application serving the MindGrid visual
mind-mapping canvas: AI proxy endpoints, canvas persistence, server-rendered
boundary pages and one-off maintenance commands.
"""

__version__ = "1.0.0"

# Don't import anything during package initialization to avoid import errors
# that could prevent the API server from starting.
# Individual modules will import what they need when they need it.

__all__ = []
