"""
Tests for the per-user OpenAI key lookup and storage.
"""

import sys
import asyncio

# CRITICAL: Set Windows event loop policy FIRST, before other imports
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(BASE_DIR))

from unittest.mock import patch

import psycopg
import pytest

from mindgrid.database.user_settings import (
    fetch_openai_api_key,
    has_openai_api_key,
    inspect_user_settings,
    save_openai_api_key,
)
from mindgrid.exceptions.errors import MissingApiKeyError, SettingsTableMissingError
from tests.helpers import TEST_USER_ID, FakeConnection, FakeCursor, fake_db_connection


def patched_connection(conn):
    return patch(
        "mindgrid.database.user_settings.get_db_connection", new=fake_db_connection(conn)
    )


@pytest.mark.asyncio
async def test_fetch_key():
    cursor = FakeCursor(results=[("sk-live",)])
    with patched_connection(FakeConnection(cursor)):
        assert await fetch_openai_api_key(TEST_USER_ID) == "sk-live"
    assert cursor.executed[0][1] == (TEST_USER_ID,)


@pytest.mark.asyncio
@pytest.mark.parametrize("row", [None, ("",), (None,)], ids=["KEY_001_no_row", "KEY_002_empty", "KEY_003_null"])
async def test_missing_key(row):
    with patched_connection(FakeConnection(FakeCursor(results=[row]))):
        with pytest.raises(MissingApiKeyError):
            await fetch_openai_api_key(TEST_USER_ID)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        psycopg.errors.UndefinedTable('relation "user_settings" does not exist'),
        psycopg.errors.UndefinedColumn('column "openai_api_key" does not exist'),
    ],
    ids=["KEY_004_no_table", "KEY_005_no_column"],
)
async def test_missing_schema(error):
    cursor = FakeCursor(errors={"user_settings": error})
    with patched_connection(FakeConnection(cursor)):
        with pytest.raises(SettingsTableMissingError):
            await fetch_openai_api_key(TEST_USER_ID)


@pytest.mark.asyncio
async def test_other_database_errors_propagate():
    cursor = FakeCursor(errors={"user_settings": psycopg.OperationalError("timeout")})
    with patched_connection(FakeConnection(cursor)):
        with pytest.raises(psycopg.OperationalError):
            await fetch_openai_api_key(TEST_USER_ID)


@pytest.mark.asyncio
async def test_has_key():
    with patched_connection(FakeConnection(FakeCursor(results=[None]))):
        assert await has_openai_api_key(TEST_USER_ID) is False
    with patched_connection(FakeConnection(FakeCursor(results=[("sk",)]))):
        assert await has_openai_api_key(TEST_USER_ID) is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "value,stored,expected",
    [(" sk-new ", "sk-new", True), ("", None, False), (None, None, False)],
)
async def test_save_key(value, stored, expected):
    cursor = FakeCursor()
    with patched_connection(FakeConnection(cursor)):
        assert await save_openai_api_key(TEST_USER_ID, value) is expected
    sql, params = cursor.executed[0]
    assert "ON CONFLICT (user_id)" in sql
    assert params == (TEST_USER_ID, stored)


@pytest.mark.asyncio
async def test_inspect_reports_errors_instead_of_raising():
    cursor = FakeCursor(errors={"user_settings": psycopg.errors.UndefinedTable("no table")})
    with patched_connection(FakeConnection(cursor)):
        report = await inspect_user_settings(TEST_USER_ID)
    assert report["user_id"] == TEST_USER_ID
    assert report["settings_query"]["data"] is None
    assert report["settings_query"]["error"]["code"] == "42P01"
    assert report["debug_info"]["all_error_code"] == "42P01"


@pytest.mark.asyncio
async def test_inspect_never_selects_the_key():
    cursor = FakeCursor(results=[[{"user_id": TEST_USER_ID, "has_openai_api_key": True}], [{"count": 1}]])
    with patched_connection(FakeConnection(cursor)):
        report = await inspect_user_settings(TEST_USER_ID)
    assert report["settings_query"]["data"][0]["has_openai_api_key"] is True
    assert "openai_api_key IS NOT NULL" in cursor.executed[0][0]
