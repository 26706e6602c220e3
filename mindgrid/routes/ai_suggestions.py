"""Three alternative rewrites of a node's text."""

from fastapi import APIRouter, Depends, HTTPException

from mindgrid.ai.openai_client import chat_completion
from mindgrid.ai.parsing import parse_suggestions
from mindgrid.ai.prompts import build_suggestions_messages
from mindgrid.config.settings import (
    OPENAI_TEXT_MODEL,
    SUGGESTIONS_MAX_TOKENS,
    SUGGESTIONS_TEMPERATURE,
)
from mindgrid.database.user_settings import fetch_openai_api_key
from mindgrid.dependencies.auth import get_current_user
from mindgrid.exceptions.errors import MindGridError, UserInputError
from mindgrid.helpers import unexpected_error_response
from mindgrid.models.requests import SuggestionsRequest
from mindgrid.models.responses import SuggestionsResponse
from mindgrid.utils.debug import print__ai_debug

router = APIRouter()


@router.post("/api/ai/suggestions", response_model=SuggestionsResponse)
async def ai_suggestions(request: SuggestionsRequest, user=Depends(get_current_user)):
    user_id = user["sub"]
    print__ai_debug(f"💡 AI suggestions request from {user_id}")

    try:
        api_key = await fetch_openai_api_key(user_id)

        if not request.instructions:
            raise UserInputError("Instructions are required")

        content, _usage = await chat_completion(
            api_key,
            model=OPENAI_TEXT_MODEL,
            messages=build_suggestions_messages(request.text, request.instructions),
            temperature=SUGGESTIONS_TEMPERATURE,
            max_tokens=SUGGESTIONS_MAX_TOKENS,
            json_mode=True,
            fallback_message="Failed to generate suggestions",
        )
        return parse_suggestions(content)

    except (HTTPException, MindGridError):
        raise
    except Exception as e:
        return unexpected_error_response(e, "ai_suggestions")
