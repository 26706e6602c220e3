"""Text actions on node content: improve, expand, summarize, and so on."""

from fastapi import APIRouter, Depends, HTTPException

from mindgrid.ai.openai_client import chat_completion
from mindgrid.ai.prompts import TEXT_ACTIONS, build_text_messages
from mindgrid.config.settings import (
    OPENAI_TEXT_MODEL,
    TEXT_MAX_TOKENS,
    TEXT_TEMPERATURE,
)
from mindgrid.database.user_settings import fetch_openai_api_key
from mindgrid.dependencies.auth import get_current_user
from mindgrid.exceptions.errors import MindGridError, UserInputError
from mindgrid.helpers import unexpected_error_response
from mindgrid.models.requests import TextRequest
from mindgrid.models.responses import TextResponse
from mindgrid.utils.debug import print__ai_debug

router = APIRouter()


@router.post("/api/ai/text", response_model=TextResponse)
async def ai_text(request: TextRequest, user=Depends(get_current_user)):
    """Run one text action with the caller's OpenAI key.

    ``text`` is required for every action except ``generate``, which uses
    ``context`` or a default prompt. Unknown actions are rejected before the
    provider is called.
    """
    user_id = user["sub"]
    print__ai_debug(f"📝 AI text request from {user_id}: action={request.action}")

    try:
        api_key = await fetch_openai_api_key(user_id)

        if not request.text and request.action != "generate":
            raise UserInputError("Text is required")

        action = TEXT_ACTIONS.get(request.action or "")
        if action is None:
            raise UserInputError("Invalid action")

        messages = build_text_messages(action, text=request.text, context=request.context)
        content, usage = await chat_completion(
            api_key,
            model=OPENAI_TEXT_MODEL,
            messages=messages,
            temperature=TEXT_TEMPERATURE,
            max_tokens=TEXT_MAX_TOKENS,
            fallback_message="Failed to process text",
        )
        return {"text": content, "usage": usage}

    except (HTTPException, MindGridError):
        raise
    except Exception as e:
        return unexpected_error_response(e, "ai_text")
