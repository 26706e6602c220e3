"""Image generation with durable storage of the result."""

from fastapi import APIRouter, Depends, HTTPException

from mindgrid.ai.openai_client import generate_image
from mindgrid.ai.parsing import ImageOptions
from mindgrid.database.user_settings import fetch_openai_api_key
from mindgrid.dependencies.auth import get_current_user
from mindgrid.exceptions.errors import MindGridError, UserInputError
from mindgrid.helpers import unexpected_error_response
from mindgrid.models.requests import ImageRequest
from mindgrid.models.responses import ImageResponse
from mindgrid.storage.supabase_storage import (
    build_object_path,
    download_bytes,
    upload_object,
)
from mindgrid.utils.debug import print__ai_debug

router = APIRouter()


@router.post("/api/ai/image", response_model=ImageResponse)
async def ai_image(request: ImageRequest, user=Depends(get_current_user)):
    """Generate an image and re-host it in the canvas-files bucket.

    The provider's URL expires, so the image is downloaded and uploaded to
    ``<user_id>/ai-generated-<ms>.png``. The response carries the public
    storage URL and the provider's revised prompt unchanged.
    """
    user_id = user["sub"]
    print__ai_debug(f"🎨 AI image request from {user_id}")

    try:
        api_key = await fetch_openai_api_key(user_id)

        if not request.prompt:
            raise UserInputError("Prompt is required")
        options = ImageOptions.from_request(request.size, request.quality)

        image_url, revised_prompt = await generate_image(
            api_key,
            prompt=request.prompt,
            size=options.size,
            quality=options.quality,
        )

        image_bytes = await download_bytes(image_url)
        path = build_object_path(user_id, "ai-generated", "png")
        public_url = await upload_object(path, image_bytes, "image/png")

        return {"url": public_url, "revised_prompt": revised_prompt}

    except (HTTPException, MindGridError):
        raise
    except Exception as e:
        return unexpected_error_response(e, "ai_image")
