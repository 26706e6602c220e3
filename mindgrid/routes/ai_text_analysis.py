"""Text analysis with three to five alternative options."""

from fastapi import APIRouter, Depends, HTTPException

from mindgrid.ai.openai_client import chat_completion
from mindgrid.ai.parsing import parse_text_analysis
from mindgrid.ai.prompts import build_text_analysis_messages
from mindgrid.config.settings import (
    ANALYSIS_MAX_TOKENS,
    ANALYSIS_TEMPERATURE,
    OPENAI_ANALYSIS_MODEL,
)
from mindgrid.database.user_settings import fetch_openai_api_key
from mindgrid.dependencies.auth import get_current_user
from mindgrid.exceptions.errors import MindGridError, UserInputError
from mindgrid.helpers import unexpected_error_response
from mindgrid.models.requests import TextAnalysisRequest
from mindgrid.models.responses import TextAnalysisResponse
from mindgrid.utils.debug import print__ai_debug

router = APIRouter()


@router.post("/api/ai/text-analysis", response_model=TextAnalysisResponse)
async def ai_text_analysis(request: TextAnalysisRequest, user=Depends(get_current_user)):
    user_id = user["sub"]
    print__ai_debug(f"🔍 AI text analysis request from {user_id}")

    try:
        api_key = await fetch_openai_api_key(user_id)

        if not request.text or not request.instructions:
            raise UserInputError("Both text and instructions are required")

        content, _usage = await chat_completion(
            api_key,
            model=OPENAI_ANALYSIS_MODEL,
            messages=build_text_analysis_messages(request.text, request.instructions),
            temperature=ANALYSIS_TEMPERATURE,
            max_tokens=ANALYSIS_MAX_TOKENS,
            json_mode=True,
            fallback_message="Failed to analyze text. Please try again.",
        )
        return parse_text_analysis(content)

    except (HTTPException, MindGridError):
        raise
    except Exception as e:
        return unexpected_error_response(e, "ai_text_analysis")
