"""
Authentication package for the MindGrid backend.

This package contains Supabase access-token verification.
"""

# Import JWT authentication functions
from .jwt_auth import verify_supabase_jwt

# Export all authentication functions for easier access
__all__ = ["verify_supabase_jwt"]
