"""Folders that group a user's canvases."""

from psycopg.rows import dict_row

from mindgrid.database.connection import get_db_connection
from mindgrid.database.rows import to_plain
from mindgrid.exceptions.errors import UserInputError
from mindgrid.utils.debug import print__canvas_debug

DEFAULT_FOLDER_COLOR = "#6366f1"


async def list_folders(user_id: str):
    """Folders of the caller ordered by name."""
    async with get_db_connection() as conn:
        async with conn.cursor(row_factory=dict_row) as cur:
            await cur.execute(
                "SELECT id, name, color, parent_id FROM folders "
                "WHERE user_id = %s ORDER BY name",
                (user_id,),
            )
            rows = await cur.fetchall()
    return [to_plain(row) for row in rows]


async def create_folder(user_id: str, name, color=None, parent_id=None):
    folder_name = (name or "").strip()
    if not folder_name:
        raise UserInputError("Folder name is required")

    async with get_db_connection() as conn:
        async with conn.cursor(row_factory=dict_row) as cur:
            await cur.execute(
                """
                INSERT INTO folders (user_id, name, color, parent_id)
                VALUES (%s, %s, %s, %s)
                RETURNING id, name, color, parent_id
                """,
                (user_id, folder_name, color or DEFAULT_FOLDER_COLOR, parent_id or None),
            )
            folder = await cur.fetchone()

    print__canvas_debug(f"📁 Folder '{folder_name}' created for {user_id}")
    return to_plain(folder)
