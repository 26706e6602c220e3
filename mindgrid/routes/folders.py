from fastapi import APIRouter, Depends, HTTPException

from mindgrid.database.folders import create_folder, list_folders
from mindgrid.dependencies.auth import get_current_user
from mindgrid.exceptions.errors import MindGridError
from mindgrid.helpers import unexpected_error_response
from mindgrid.models.requests import CreateFolderRequest

router = APIRouter()


@router.get("/api/folders")
async def get_folders(user=Depends(get_current_user)):
    """Folders of the caller, ordered by name."""
    try:
        return {"folders": await list_folders(user["sub"])}
    except (HTTPException, MindGridError):
        raise
    except Exception as e:
        return unexpected_error_response(e, "get_folders")


@router.post("/api/folders")
async def post_folder(request: CreateFolderRequest, user=Depends(get_current_user)):
    try:
        folder = await create_folder(
            user["sub"], request.name, color=request.color, parent_id=request.parent_id
        )
        return {"folder": folder}
    except (HTTPException, MindGridError):
        raise
    except Exception as e:
        return unexpected_error_response(e, "post_folder")
