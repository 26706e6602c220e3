"""Supabase Storage access over its REST API."""

import time

import httpx

from mindgrid.config.settings import (
    HTTP_TIMEOUT_SECONDS,
    STORAGE_BUCKET,
    STORAGE_CACHE_CONTROL,
    get_service_role_key,
    get_supabase_url,
)
from mindgrid.exceptions.errors import StorageError
from mindgrid.utils.debug import print__storage_debug


# ==============================================================================
# PATHS AND URLS
# ==============================================================================
def timestamp_ms() -> int:
    return int(time.time() * 1000)


def build_object_path(user_id: str, prefix: str, extension: str, ms=None) -> str:
    """``<user_id>/<prefix>-<epoch ms>.<extension>``, the per-user folder layout."""
    ms = timestamp_ms() if ms is None else ms
    return f"{user_id}/{prefix}-{ms}.{extension.lstrip('.')}"


def get_public_url(path: str, bucket: str = STORAGE_BUCKET) -> str:
    return f"{get_supabase_url()}/storage/v1/object/public/{bucket}/{path}"


# ==============================================================================
# UPLOAD
# ==============================================================================
async def upload_object(
    path: str,
    content: bytes,
    content_type: str,
    bucket: str = STORAGE_BUCKET,
    client: httpx.AsyncClient = None,
) -> str:
    """Upload bytes to the bucket and return the object's public URL.

    Existing objects are never overwritten (``x-upsert: false``).

    Raises:
        StorageError: the storage API answered with a non-2xx status or could
            not be reached.
    """
    service_key = get_service_role_key()
    url = f"{get_supabase_url()}/storage/v1/object/{bucket}/{path}"
    headers = {
        "Authorization": f"Bearer {service_key}",
        "apikey": service_key,
        "Content-Type": content_type,
        "cache-control": f"max-age={STORAGE_CACHE_CONTROL}",
        "x-upsert": "false",
    }

    print__storage_debug(f"⬆️ Uploading {len(content)} bytes to {bucket}/{path}")
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS) as own_client:
                response = await own_client.post(url, content=content, headers=headers)
        else:
            response = await client.post(url, content=content, headers=headers)
    except httpx.HTTPError as exc:
        print__storage_debug(f"❌ Upload request failed: {type(exc).__name__}: {exc}")
        raise StorageError() from exc

    if response.status_code >= 300:
        print__storage_debug(
            f"❌ Upload error: {response.status_code} - {response.text[:500]}"
        )
        raise StorageError()

    public_url = get_public_url(path, bucket)
    print__storage_debug(f"✅ Uploaded: {public_url}")
    return public_url


async def download_bytes(url: str, client: httpx.AsyncClient = None) -> bytes:
    """Fetch a transient provider URL (generated images)."""
    print__storage_debug(f"⬇️ Downloading {url[:80]}")
    if client is None:
        async with httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS) as own_client:
            response = await own_client.get(url)
    else:
        response = await client.get(url)
    if response.status_code != 200:
        raise RuntimeError("Failed to download generated image")
    return response.content
