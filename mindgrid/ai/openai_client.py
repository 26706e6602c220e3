"""OpenAI calls made with the caller's own API key.

A fresh AsyncOpenAI client is built per request because the key differs per
user. SDK retries are disabled; every provider call is attempted once.
"""

import openai
from openai import AsyncOpenAI

from mindgrid.config.settings import HTTP_TIMEOUT_SECONDS, OPENAI_IMAGE_MODEL
from mindgrid.exceptions.errors import UpstreamProviderError
from mindgrid.utils.debug import print__ai_debug


def create_client(api_key: str) -> AsyncOpenAI:
    return AsyncOpenAI(api_key=api_key, max_retries=0, timeout=HTTP_TIMEOUT_SECONDS)


def provider_error_message(exc: openai.APIStatusError, fallback: str) -> str:
    """Best human-readable message from a provider error body."""
    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        nested = body.get("error")
        if isinstance(nested, dict) and nested.get("message"):
            return nested["message"]
        if body.get("message"):
            return body["message"]
    return fallback


def to_upstream_error(exc: Exception, fallback: str) -> UpstreamProviderError:
    """Map an SDK exception to UpstreamProviderError.

    Status errors keep the provider's status code and message; anything else
    (connection failures, timeouts) becomes a generic 500.
    """
    if isinstance(exc, openai.APIStatusError):
        print__ai_debug(f"OpenAI API error: {exc.status_code} {getattr(exc, 'body', None)}")
        return UpstreamProviderError(
            provider_error_message(exc, fallback), status_code=exc.status_code
        )
    print__ai_debug(f"OpenAI call failed: {type(exc).__name__}: {exc}")
    return UpstreamProviderError(fallback, status_code=500)


async def chat_completion(
    api_key: str,
    *,
    model: str,
    messages,
    temperature: float,
    max_tokens: int,
    json_mode: bool = False,
    fallback_message: str = "Failed to process text",
    client: AsyncOpenAI = None,
):
    """Run one chat completion.

    Returns:
        tuple: (message content, usage dict or None)

    Raises:
        UpstreamProviderError: provider or network failure.
    """
    client = client or create_client(api_key)
    params = {
        "model": model,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    if json_mode:
        params["response_format"] = {"type": "json_object"}

    print__ai_debug(f"🤖 Chat completion: model={model} json_mode={json_mode}")
    try:
        completion = await client.chat.completions.create(**params)
    except openai.OpenAIError as exc:
        raise to_upstream_error(exc, fallback_message) from exc

    content = completion.choices[0].message.content
    usage = completion.usage.model_dump() if completion.usage is not None else None
    print__ai_debug(f"✅ Chat completion done: usage={usage}")
    return content, usage


async def generate_image(
    api_key: str,
    *,
    prompt: str,
    size: str,
    quality: str,
    client: AsyncOpenAI = None,
):
    """Generate one image.

    Returns:
        tuple: (transient image URL, revised prompt or None)
    """
    client = client or create_client(api_key)
    print__ai_debug(f"🎨 Image generation: size={size} quality={quality}")
    try:
        result = await client.images.generate(
            model=OPENAI_IMAGE_MODEL,
            prompt=prompt,
            n=1,
            size=size,
            quality=quality,
        )
    except openai.OpenAIError as exc:
        raise to_upstream_error(exc, "Failed to generate image") from exc

    image = result.data[0]
    return image.url, getattr(image, "revised_prompt", None)
