# CRITICAL: Set Windows event loop policy FIRST, before any other imports
# This must be the very first thing that happens to fix psycopg compatibility
import os
import sys

if sys.platform == "win32":
    import asyncio

    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Load environment variables early
from dotenv import load_dotenv

load_dotenv()


# ==============================================================================
# DEBUG FUNCTIONS
# ==============================================================================
def _emit(flag: str, label: str, msg: str) -> None:
    if os.environ.get(flag, "0") == "1":
        print(f"[{label}] {msg}")
        sys.stdout.flush()


def print__debug(msg: str) -> None:
    """Print DEBUG messages when debug mode is enabled.

    Args:
        msg: The message to print
    """
    _emit("DEBUG", "DEBUG", msg)


def print__token_debug(msg: str) -> None:
    """Print print__token_debug messages when debug mode is enabled.

    Args:
        msg: The message to print
    """
    _emit("print__token_debug", "print__token_debug", msg)


def print__ai_debug(msg: str) -> None:
    """Print AI proxy messages (OpenAI calls, key lookups, parsing).

    Args:
        msg: The message to print
    """
    _emit("print__ai_debug", "print__ai_debug", msg)


def print__canvas_debug(msg: str) -> None:
    """Print canvas creation / graph persistence messages.

    Args:
        msg: The message to print
    """
    _emit("print__canvas_debug", "print__canvas_debug", msg)


def print__storage_debug(msg: str) -> None:
    """Print Supabase Storage upload messages."""
    _emit("print__storage_debug", "print__storage_debug", msg)


def print__db_debug(msg: str) -> None:
    """Print database connection and pool messages."""
    _emit("print__db_debug", "print__db_debug", msg)


def print__pages_debug(msg: str) -> None:
    """Print server-rendered page and redirect messages."""
    _emit("print__pages_debug", "print__pages_debug", msg)


def print__migration_debug(msg: str) -> None:
    """Print extra detail from the maintenance commands."""
    _emit("print__migration_debug", "print__migration_debug", msg)


def print__startup_debug(msg: str) -> None:
    """Print startup/shutdown messages when DEBUG is enabled."""
    _emit("DEBUG", "STARTUP", msg)
