"""Diagnostics for the user_settings table.

Only mounted when MINDGRID_DEBUG_ENDPOINTS=1; see ``mindgrid.main``.
"""

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from mindgrid.database.user_settings import inspect_user_settings
from mindgrid.dependencies.auth import get_current_user
from mindgrid.utils.debug import print__ai_debug

router = APIRouter()


@router.get("/api/ai/debug")
async def ai_debug(user=Depends(get_current_user)):
    user_id = user["sub"]
    print__ai_debug(f"🐛 Settings diagnostics requested by {user_id}")
    try:
        report = await inspect_user_settings(user_id)
        return JSONResponse(content=jsonable_encoder(report))
    except Exception as e:
        print__ai_debug(f"Debug error: {type(e).__name__}: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Debug check failed", "details": str(e)},
        )
