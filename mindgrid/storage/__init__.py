"""
Storage package for the MindGrid backend.

Uploads to the Supabase Storage bucket that holds canvas files.
"""

from .supabase_storage import (
    build_object_path,
    download_bytes,
    get_public_url,
    upload_object,
)

__all__ = ["build_object_path", "download_bytes", "get_public_url", "upload_object"]
