"""
Test for Phase 8: AI Proxy Endpoints
Session and key checks, input validation, provider failures and payload
contracts for /api/ai/*.
"""

import json
import sys
import asyncio

# CRITICAL: Set Windows event loop policy FIRST, before other imports
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(BASE_DIR))

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

from mindgrid.ai.openai_client import chat_completion, generate_image
from mindgrid.config.settings import OPENAI_ANALYSIS_MODEL
from mindgrid.dependencies.auth import get_current_user
from mindgrid.exceptions.errors import (
    MissingApiKeyError,
    SettingsTableMissingError,
    UpstreamProviderError,
)
from mindgrid.main import app
from tests.helpers import TEST_USER_ID, make_user_claims

API_KEY = "sk-test-key"


@pytest.fixture
def client():
    app.dependency_overrides[get_current_user] = lambda: make_user_claims()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(monkeypatch):
    monkeypatch.setenv("USE_TEST_TOKENS", "0")
    app.dependency_overrides.clear()
    return TestClient(app)


def stored_key(value=API_KEY, side_effect=None):
    return AsyncMock(return_value=value, side_effect=side_effect)


def suggestions_json(count=3):
    return json.dumps(
        {
            "suggestions": [
                {"suggestion": f"S{i}", "explanation": f"E{i}"} for i in range(count)
            ]
        }
    )


# ==============================================================================
# SESSION AND KEY CHECKS
# ==============================================================================
AI_ENDPOINTS = [
    {"test_id": "AI_001", "route": "ai_text", "path": "/api/ai/text", "body": {"action": "improve", "text": "x"}},
    {"test_id": "AI_002", "route": "ai_image", "path": "/api/ai/image", "body": {"prompt": "x"}},
    {"test_id": "AI_003", "route": "ai_suggestions", "path": "/api/ai/suggestions", "body": {"instructions": "x"}},
    {"test_id": "AI_004", "route": "ai_text_analysis", "path": "/api/ai/text-analysis", "body": {"text": "x", "instructions": "y"}},
]


@pytest.mark.parametrize("case", AI_ENDPOINTS, ids=[c["test_id"] for c in AI_ENDPOINTS])
def test_no_session_is_401_without_any_lookup(anonymous_client, case):
    lookup = stored_key()
    with patch(f"mindgrid.routes.{case['route']}.fetch_openai_api_key", new=lookup):
        response = anonymous_client.post(case["path"], json=case["body"])
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
    lookup.assert_not_called()


@pytest.mark.parametrize("case", AI_ENDPOINTS, ids=[c["test_id"] for c in AI_ENDPOINTS])
def test_missing_key_is_400(client, case):
    with patch(
        f"mindgrid.routes.{case['route']}.fetch_openai_api_key",
        new=stored_key(side_effect=MissingApiKeyError()),
    ):
        response = client.post(case["path"], json=case["body"])
    assert response.status_code == 400
    assert response.json() == {
        "error": "OpenAI API key not configured. Please add your API key in settings."
    }


def test_missing_settings_table_is_500(client):
    with patch(
        "mindgrid.routes.ai_text.fetch_openai_api_key",
        new=stored_key(side_effect=SettingsTableMissingError()),
    ):
        response = client.post("/api/ai/text", json={"action": "improve", "text": "x"})
    assert response.status_code == 500
    assert "user_settings migration" in response.json()["error"]


def test_key_is_checked_before_fields(client):
    with patch(
        "mindgrid.routes.ai_text.fetch_openai_api_key",
        new=stored_key(side_effect=MissingApiKeyError()),
    ):
        response = client.post("/api/ai/text", json={})
    assert response.status_code == 400
    assert "API key" in response.json()["error"]


# ==============================================================================
# /api/ai/text
# ==============================================================================
TEXT_VALIDATION_TESTS = [
    {"test_id": "TXT_001", "body": {"action": "improve"}, "error": "Text is required"},
    {"test_id": "TXT_002", "body": {"action": "improve", "text": ""}, "error": "Text is required"},
    {"test_id": "TXT_003", "body": {"action": "translate", "text": "hi"}, "error": "Invalid action"},
    {"test_id": "TXT_004", "body": {"text": "hi"}, "error": "Invalid action"},
]


@pytest.mark.parametrize("case", TEXT_VALIDATION_TESTS, ids=[c["test_id"] for c in TEXT_VALIDATION_TESTS])
def test_text_validation(client, case):
    completion = AsyncMock()
    with patch("mindgrid.routes.ai_text.fetch_openai_api_key", new=stored_key()), patch(
        "mindgrid.routes.ai_text.chat_completion", new=completion
    ):
        response = client.post("/api/ai/text", json=case["body"])
    assert response.status_code == 400
    assert response.json() == {"error": case["error"]}
    completion.assert_not_called()


def test_text_improve_success(client):
    usage = {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15}
    completion = AsyncMock(return_value=("Better text", usage))
    with patch("mindgrid.routes.ai_text.fetch_openai_api_key", new=stored_key()), patch(
        "mindgrid.routes.ai_text.chat_completion", new=completion
    ):
        response = client.post("/api/ai/text", json={"action": "improve", "text": "text"})

    assert response.status_code == 200
    assert response.json() == {"text": "Better text", "usage": usage}
    args, kwargs = completion.call_args
    assert args == (API_KEY,)
    assert kwargs["temperature"] == 0.7
    assert kwargs["max_tokens"] == 1000
    assert kwargs["messages"][1]["content"] == "text"


def test_generate_without_text_uses_context(client):
    completion = AsyncMock(return_value=("Poem", None))
    with patch("mindgrid.routes.ai_text.fetch_openai_api_key", new=stored_key()), patch(
        "mindgrid.routes.ai_text.chat_completion", new=completion
    ):
        response = client.post("/api/ai/text", json={"action": "generate", "context": "Write a poem"})
    assert response.status_code == 200
    assert completion.call_args.kwargs["messages"][1]["content"] == "Write a poem"


def test_provider_status_is_passed_through(client):
    with patch("mindgrid.routes.ai_text.fetch_openai_api_key", new=stored_key()), patch(
        "mindgrid.routes.ai_text.chat_completion",
        new=AsyncMock(side_effect=UpstreamProviderError("Rate limit reached", status_code=429)),
    ):
        response = client.post("/api/ai/text", json={"action": "improve", "text": "x"})
    assert response.status_code == 429
    assert response.json() == {"error": "Rate limit reached"}


# ==============================================================================
# /api/ai/suggestions and /api/ai/text-analysis
# ==============================================================================
def test_suggestions_requires_instructions(client):
    with patch("mindgrid.routes.ai_suggestions.fetch_openai_api_key", new=stored_key()):
        response = client.post("/api/ai/suggestions", json={"text": "x"})
    assert response.status_code == 400
    assert response.json() == {"error": "Instructions are required"}


def test_suggestions_returns_exactly_three(client):
    completion = AsyncMock(return_value=(suggestions_json(), None))
    with patch("mindgrid.routes.ai_suggestions.fetch_openai_api_key", new=stored_key()), patch(
        "mindgrid.routes.ai_suggestions.chat_completion", new=completion
    ):
        response = client.post("/api/ai/suggestions", json={"instructions": "Make it fun"})
    assert response.status_code == 200
    assert len(response.json()["suggestions"]) == 3
    assert completion.call_args.kwargs["json_mode"] is True


def test_suggestions_wrong_count_is_500(client):
    with patch("mindgrid.routes.ai_suggestions.fetch_openai_api_key", new=stored_key()), patch(
        "mindgrid.routes.ai_suggestions.chat_completion",
        new=AsyncMock(return_value=(suggestions_json(2), None)),
    ):
        response = client.post("/api/ai/suggestions", json={"instructions": "x"})
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to parse AI suggestions"}


@pytest.mark.parametrize("body", [{"text": "x"}, {"instructions": "y"}, {}])
def test_text_analysis_requires_both_fields(client, body):
    with patch("mindgrid.routes.ai_text_analysis.fetch_openai_api_key", new=stored_key()):
        response = client.post("/api/ai/text-analysis", json=body)
    assert response.status_code == 400
    assert response.json() == {"error": "Both text and instructions are required"}


def test_text_analysis_success(client):
    content = json.dumps(
        {
            "analysis": "A short note",
            "options": [
                {"title": f"T{i}", "content": f"C{i}", "reasoning": f"R{i}"} for i in range(4)
            ],
        }
    )
    completion = AsyncMock(return_value=(content, None))
    with patch("mindgrid.routes.ai_text_analysis.fetch_openai_api_key", new=stored_key()), patch(
        "mindgrid.routes.ai_text_analysis.chat_completion", new=completion
    ):
        response = client.post("/api/ai/text-analysis", json={"text": "x", "instructions": "y"})
    assert response.status_code == 200
    assert len(response.json()["options"]) == 4
    assert completion.call_args.kwargs["model"] == OPENAI_ANALYSIS_MODEL


# ==============================================================================
# /api/ai/image
# ==============================================================================
def test_image_requires_prompt(client):
    with patch("mindgrid.routes.ai_image.fetch_openai_api_key", new=stored_key()):
        response = client.post("/api/ai/image", json={"size": "1024x1024"})
    assert response.status_code == 400
    assert response.json() == {"error": "Prompt is required"}


def test_image_rejects_unknown_size(client):
    generate = AsyncMock()
    with patch("mindgrid.routes.ai_image.fetch_openai_api_key", new=stored_key()), patch(
        "mindgrid.routes.ai_image.generate_image", new=generate
    ):
        response = client.post("/api/ai/image", json={"prompt": "x", "size": "256x256"})
    assert response.status_code == 400
    generate.assert_not_called()


def test_image_is_rehosted_in_storage(client):
    generate = AsyncMock(return_value=("https://provider/tmp.png", "A revised prompt"))
    download = AsyncMock(return_value=b"\x89PNG")
    upload = AsyncMock(return_value="https://abc.supabase.co/storage/v1/object/public/canvas-files/u/ai.png")
    with patch("mindgrid.routes.ai_image.fetch_openai_api_key", new=stored_key()), patch(
        "mindgrid.routes.ai_image.generate_image", new=generate
    ), patch("mindgrid.routes.ai_image.download_bytes", new=download), patch(
        "mindgrid.routes.ai_image.upload_object", new=upload
    ):
        response = client.post("/api/ai/image", json={"prompt": "A city", "quality": "hd"})

    assert response.status_code == 200
    assert response.json() == {
        "url": "https://abc.supabase.co/storage/v1/object/public/canvas-files/u/ai.png",
        "revised_prompt": "A revised prompt",
    }
    assert generate.call_args.kwargs["quality"] == "hd"
    path, content, content_type = upload.call_args.args
    assert path.startswith(f"{TEST_USER_ID}/ai-generated-")
    assert path.endswith(".png")
    assert content == b"\x89PNG"
    assert content_type == "image/png"


def test_image_download_failure_is_generic_500(client, monkeypatch):
    monkeypatch.setenv("DEBUG_TRACEBACK", "0")
    with patch("mindgrid.routes.ai_image.fetch_openai_api_key", new=stored_key()), patch(
        "mindgrid.routes.ai_image.generate_image",
        new=AsyncMock(return_value=("https://provider/tmp.png", None)),
    ), patch(
        "mindgrid.routes.ai_image.download_bytes",
        new=AsyncMock(side_effect=RuntimeError("Failed to download generated image")),
    ):
        response = client.post("/api/ai/image", json={"prompt": "x"})
    assert response.status_code == 500
    assert response.json() == {"error": "An unexpected error occurred"}


# ==============================================================================
# PROVIDER CLIENT
# ==============================================================================
def provider_response(status_code):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    return httpx.Response(status_code, request=request)


def fake_chat_client(result=None, error=None):
    create = AsyncMock(return_value=result, side_effect=error)
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


@pytest.mark.asyncio
async def test_chat_completion_returns_content_and_usage():
    usage = MagicMock()
    usage.model_dump.return_value = {"total_tokens": 3}
    completion = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content="ok"))],
        usage=usage,
    )
    client = fake_chat_client(result=completion)

    content, usage_dict = await chat_completion(
        API_KEY,
        model="m",
        messages=[],
        temperature=0.8,
        max_tokens=10,
        json_mode=True,
        client=client,
    )

    assert (content, usage_dict) == ("ok", {"total_tokens": 3})
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["response_format"] == {"type": "json_object"}


@pytest.mark.asyncio
async def test_chat_completion_keeps_provider_status():
    error = openai.RateLimitError(
        "Rate limit",
        response=provider_response(429),
        body={"error": {"message": "Rate limit reached for requests"}},
    )
    with pytest.raises(UpstreamProviderError) as exc_info:
        await chat_completion(
            API_KEY, model="m", messages=[], temperature=0.7, max_tokens=10,
            client=fake_chat_client(error=error),
        )
    assert exc_info.value.status_code == 429
    assert exc_info.value.message == "Rate limit reached for requests"


@pytest.mark.asyncio
async def test_chat_completion_network_failure_is_500():
    error = openai.APIConnectionError(
        request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    )
    with pytest.raises(UpstreamProviderError) as exc_info:
        await chat_completion(
            API_KEY, model="m", messages=[], temperature=0.7, max_tokens=10,
            fallback_message="Failed to process text",
            client=fake_chat_client(error=error),
        )
    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "Failed to process text"


@pytest.mark.asyncio
async def test_generate_image_returns_url_and_revised_prompt():
    image = SimpleNamespace(url="https://provider/img.png", revised_prompt="revised")
    generate = AsyncMock(return_value=SimpleNamespace(data=[image]))
    client = SimpleNamespace(images=SimpleNamespace(generate=generate))

    url, revised = await generate_image(
        API_KEY, prompt="p", size="1024x1024", quality="standard", client=client
    )

    assert (url, revised) == ("https://provider/img.png", "revised")
    assert generate.call_args.kwargs["n"] == 1
