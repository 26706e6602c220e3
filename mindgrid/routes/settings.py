from fastapi import APIRouter, Depends, HTTPException

from mindgrid.database.user_settings import has_openai_api_key, save_openai_api_key
from mindgrid.dependencies.auth import get_current_user
from mindgrid.exceptions.errors import MindGridError
from mindgrid.helpers import unexpected_error_response
from mindgrid.models.requests import UpdateSettingsRequest
from mindgrid.models.responses import SettingsResponse

router = APIRouter()


@router.get("/api/settings", response_model=SettingsResponse)
async def get_settings(user=Depends(get_current_user)):
    """Whether the caller has stored an OpenAI key. The key itself is never returned."""
    try:
        return {"has_openai_api_key": await has_openai_api_key(user["sub"])}
    except (HTTPException, MindGridError):
        raise
    except Exception as e:
        return unexpected_error_response(e, "get_settings")


@router.put("/api/settings", response_model=SettingsResponse)
async def put_settings(request: UpdateSettingsRequest, user=Depends(get_current_user)):
    try:
        stored = await save_openai_api_key(user["sub"], request.openai_api_key)
        return {"has_openai_api_key": stored}
    except (HTTPException, MindGridError):
        raise
    except Exception as e:
        return unexpected_error_response(e, "put_settings")
