"""
Database package for the MindGrid backend.

Connection management for the Supabase Postgres instance and the data access
functions for canvases, graphs, folders and user settings.
"""

from .canvases import (
    create_canvas,
    create_sub_canvas,
    get_breadcrumbs,
    get_sub_canvas,
    list_canvases,
    rename_canvas,
)
from .connection import (
    close_pool,
    get_connection_string,
    get_db_connection,
    get_direct_connection,
    open_pool,
)
from .folders import create_folder, list_folders
from .graph import load_canvas, save_graph
from .user_settings import (
    fetch_openai_api_key,
    has_openai_api_key,
    inspect_user_settings,
    save_openai_api_key,
)

__all__ = [
    "close_pool",
    "create_canvas",
    "create_folder",
    "create_sub_canvas",
    "fetch_openai_api_key",
    "get_breadcrumbs",
    "get_connection_string",
    "get_db_connection",
    "get_direct_connection",
    "get_sub_canvas",
    "has_openai_api_key",
    "inspect_user_settings",
    "list_canvases",
    "list_folders",
    "load_canvas",
    "open_pool",
    "rename_canvas",
    "save_graph",
    "save_openai_api_key",
]
