"""Per-user settings: the bring-your-own OpenAI API key."""

import psycopg
from psycopg.rows import dict_row

from mindgrid.database.connection import get_db_connection
from mindgrid.exceptions.errors import MissingApiKeyError, SettingsTableMissingError
from mindgrid.utils.debug import print__ai_debug, print__db_debug

# SQLSTATE codes meaning the user_settings migration has not been applied
SCHEMA_MISSING_SQLSTATES = {"42P01", "42703"}


def _is_schema_missing(exc: psycopg.Error) -> bool:
    return getattr(exc, "sqlstate", None) in SCHEMA_MISSING_SQLSTATES


async def fetch_openai_api_key(user_id: str) -> str:
    """Return the caller's stored OpenAI key.

    Raises:
        SettingsTableMissingError: table or column missing (HTTP 500).
        MissingApiKeyError: no row, or the key is empty (HTTP 400).
    """
    print__ai_debug(f"🔑 Loading OpenAI key for user {user_id}")
    try:
        async with get_db_connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    "SELECT openai_api_key FROM user_settings WHERE user_id = %s LIMIT 1",
                    (user_id,),
                )
                row = await cur.fetchone()
    except psycopg.Error as exc:
        print__ai_debug(f"Settings error: {getattr(exc, 'sqlstate', None)} {exc}")
        if _is_schema_missing(exc):
            raise SettingsTableMissingError() from exc
        raise

    if not row or not row[0]:
        print__ai_debug(f"❌ No OpenAI key stored for user {user_id}")
        raise MissingApiKeyError()
    return row[0]


async def has_openai_api_key(user_id: str) -> bool:
    try:
        await fetch_openai_api_key(user_id)
    except MissingApiKeyError:
        return False
    return True


async def save_openai_api_key(user_id: str, api_key):
    """Insert or update the caller's key. An empty value clears it."""
    value = api_key.strip() if api_key else None
    try:
        async with get_db_connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    INSERT INTO user_settings (user_id, openai_api_key)
                    VALUES (%s, %s)
                    ON CONFLICT (user_id)
                    DO UPDATE SET openai_api_key = EXCLUDED.openai_api_key,
                                  updated_at = NOW()
                    """,
                    (user_id, value),
                )
    except psycopg.Error as exc:
        if _is_schema_missing(exc):
            raise SettingsTableMissingError() from exc
        raise
    print__db_debug(f"Stored OpenAI key for user {user_id} (cleared={value is None})")
    return value is not None


async def inspect_user_settings(user_id: str):
    """Raw diagnostics for the opt-in debug endpoint.

    Runs the caller's settings query and a table-existence check and reports
    each outcome, errors included, instead of raising.
    """

    async def _run(query, params):
        try:
            async with get_db_connection() as conn:
                async with conn.cursor(row_factory=dict_row) as cur:
                    await cur.execute(query, params)
                    return await cur.fetchall(), None
        except psycopg.Error as exc:
            return None, {
                "code": getattr(exc, "sqlstate", None),
                "message": str(exc),
            }

    settings, settings_error = await _run(
        "SELECT user_id, openai_api_key IS NOT NULL AS has_openai_api_key, "
        "created_at, updated_at FROM user_settings WHERE user_id = %s",
        (user_id,),
    )
    all_settings, all_error = await _run(
        "SELECT count(*) AS count FROM user_settings LIMIT 1", ()
    )

    return {
        "user_id": user_id,
        "settings_query": {"data": settings, "error": settings_error},
        "table_exists_check": {"data": all_settings, "error": all_error},
        "debug_info": {
            "settings_error_code": (settings_error or {}).get("code"),
            "settings_error_message": (settings_error or {}).get("message"),
            "all_error_code": (all_error or {}).get("code"),
            "all_error_message": (all_error or {}).get("message"),
        },
    }
