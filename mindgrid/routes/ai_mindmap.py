"""Mind map generation from a pasted conversation or document.

``analyze-content`` runs the staged analysis with the caller's key;
``generate-mindmap`` lays out an analysis and needs no provider call.
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from mindgrid.ai.content_analysis import (
    ANALYZE_FAILED,
    CONSOLE_LOG_MESSAGE,
    analyze_content,
    looks_like_console_log,
)
from mindgrid.ai.mindmap_layout import generate_mind_map
from mindgrid.database.user_settings import fetch_openai_api_key
from mindgrid.dependencies.auth import get_current_user
from mindgrid.exceptions.errors import MindGridError, UserInputError
from mindgrid.helpers import traceback_json_response
from mindgrid.models.requests import AnalyzeContentRequest, MindMapAnalysis
from mindgrid.utils.debug import print__ai_debug

router = APIRouter()

GENERATE_FAILED = "Failed to generate mind map"


@router.post("/api/ai/analyze-content")
async def ai_analyze_content(request: AnalyzeContentRequest, user=Depends(get_current_user)):
    user_id = user["sub"]
    print__ai_debug(f"🧠 Content analysis request from {user_id}")

    try:
        api_key = await fetch_openai_api_key(user_id)

        content = request.content or ""
        if not content.strip():
            raise UserInputError("Content is required")
        if looks_like_console_log(content):
            print__ai_debug("Rejected content that looks like console output")
            raise UserInputError(CONSOLE_LOG_MESSAGE)

        analysis = await analyze_content(api_key, content, title=request.title)
        return analysis

    except (HTTPException, MindGridError):
        raise
    except Exception as e:
        print__ai_debug(f"Content analysis error: {type(e).__name__}: {e}")
        return traceback_json_response(e) or JSONResponse(
            status_code=500, content={"error": ANALYZE_FAILED}
        )


@router.post("/api/ai/generate-mindmap")
async def ai_generate_mindmap(request: MindMapAnalysis, user=Depends(get_current_user)):
    print__ai_debug(f"🗺️ Mind map layout request from {user['sub']}")

    try:
        if not request.structure:
            raise UserInputError("Analysis structure is required")

        mind_map = generate_mind_map(request.model_dump())
        print__ai_debug(
            f"🗺️ Generated {mind_map['metadata']['totalNodes']} nodes, "
            f"{mind_map['metadata']['totalEdges']} edges"
        )
        return mind_map

    except (HTTPException, MindGridError):
        raise
    except Exception as e:
        print__ai_debug(f"Mind map generation error: {type(e).__name__}: {e}")
        return traceback_json_response(e) or JSONResponse(
            status_code=500, content={"error": GENERATE_FAILED}
        )
