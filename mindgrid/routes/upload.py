"""Image uploads for image nodes."""

from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from mindgrid.config.settings import UPLOAD_ALLOWED_TYPES, UPLOAD_MAX_BYTES
from mindgrid.dependencies.auth import get_current_user
from mindgrid.exceptions.errors import MindGridError, UserInputError
from mindgrid.helpers import unexpected_error_response
from mindgrid.models.responses import UploadResponse
from mindgrid.storage.supabase_storage import build_object_path, upload_object
from mindgrid.utils.debug import print__storage_debug

router = APIRouter()


def file_extension(filename) -> str:
    """Text after the last dot, or the whole name when there is no dot."""
    return (filename or "").rsplit(".", 1)[-1] or "bin"


@router.post("/api/upload", response_model=UploadResponse)
async def upload_file(
    file: Optional[UploadFile] = File(None), user=Depends(get_current_user)
):
    """Store an image in ``canvas-files`` under ``<user_id>/upload-<ms>.<ext>``.

    Only image types are accepted, up to 10 MB.
    """
    user_id = user["sub"]
    try:
        if file is None:
            raise UserInputError("No file provided")

        content_type = file.content_type or ""
        if content_type not in UPLOAD_ALLOWED_TYPES:
            raise UserInputError("Invalid file type. Only images are allowed.")

        content = await file.read()
        if len(content) > UPLOAD_MAX_BYTES:
            raise UserInputError("File too large. Maximum size is 10MB.")

        path = build_object_path(user_id, "upload", file_extension(file.filename))
        print__storage_debug(f"📎 Upload from {user_id}: {file.filename} ({len(content)} bytes)")
        public_url = await upload_object(path, content, content_type)

        return {
            "url": public_url,
            "fileName": file.filename,
            "fileSize": len(content),
            "fileType": content_type,
        }

    except (HTTPException, MindGridError):
        raise
    except Exception as e:
        return unexpected_error_response(e, "upload_file")
