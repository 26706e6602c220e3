"""
Configuration package for the MindGrid backend.

This package contains settings, constants, and configuration management
read from the process environment (.env supported).
"""

# Import key configuration items for easier access
from .settings import (
    OPENAI_ANALYSIS_MODEL,
    OPENAI_IMAGE_MODEL,
    OPENAI_TEXT_MODEL,
    SESSION_COOKIE_NAME,
    STORAGE_BUCKET,
    UPLOAD_ALLOWED_TYPES,
    UPLOAD_MAX_BYTES,
    debug_endpoints_enabled,
    get_db_config,
    get_jwt_secret,
    get_service_role_key,
    get_supabase_url,
    start_time,
    use_test_tokens,
    validate_required_settings,
)

__all__ = [
    "OPENAI_ANALYSIS_MODEL",
    "OPENAI_IMAGE_MODEL",
    "OPENAI_TEXT_MODEL",
    "SESSION_COOKIE_NAME",
    "STORAGE_BUCKET",
    "UPLOAD_ALLOWED_TYPES",
    "UPLOAD_MAX_BYTES",
    "debug_endpoints_enabled",
    "get_db_config",
    "get_jwt_secret",
    "get_service_role_key",
    "get_supabase_url",
    "start_time",
    "use_test_tokens",
    "validate_required_settings",
]
