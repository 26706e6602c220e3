# CRITICAL: Set Windows event loop policy FIRST, before any other imports
# This must be the very first thing that happens to fix psycopg compatibility
import sys

if sys.platform == "win32":
    import asyncio

    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Load environment variables early
from dotenv import load_dotenv

load_dotenv()

# Standard imports
import traceback
from typing import Optional

from fastapi import Request

from mindgrid.auth.jwt_auth import verify_supabase_jwt
from mindgrid.config.settings import SESSION_COOKIE_NAME
from mindgrid.exceptions.errors import AuthenticationError
from mindgrid.utils.debug import print__token_debug


# ==============================================================================
# AUTHENTICATION DEPENDENCIES
# ==============================================================================
def extract_session_token(request: Request) -> Optional[str]:
    """Return the access token from the Authorization header or session cookie.

    The header wins when both are present. Returns None when neither carries
    a usable value; a malformed Authorization header raises.
    """
    authorization = request.headers.get("authorization")
    if authorization:
        if not authorization.startswith("Bearer "):
            print__token_debug("❌ AUTH ERROR: Invalid authorization header format")
            raise AuthenticationError(
                "Invalid Authorization header format. Expected 'Bearer <token>'"
            )
        token = authorization.split(" ", 1)[1].strip()
        if not token:
            raise AuthenticationError("Invalid Authorization header format")
        return token

    cookie_token = request.cookies.get(SESSION_COOKIE_NAME)
    if cookie_token:
        print__token_debug("🔍 AUTH CHECK: using session cookie")
        return cookie_token.strip() or None
    return None


def get_current_user(request: Request):
    """Resolve the authenticated user for a protected endpoint.

    Returns:
        dict: verified token claims; ``sub`` is the Supabase user id.

    Raises:
        AuthenticationError: (401) missing, malformed or invalid session.
    """
    try:
        print__token_debug("🔑 AUTHENTICATION START: resolving current user")
        token = extract_session_token(request)
        if not token:
            print__token_debug("❌ AUTH ERROR: no session token provided")
            raise AuthenticationError()

        user_info = verify_supabase_jwt(token)
        print__token_debug(
            f"✅ AUTH SUCCESS: user {user_info.get('sub')} ({user_info.get('email', 'Unknown')})"
        )
        return user_info

    except AuthenticationError as ae:
        print__token_debug(f"❌ AUTH FAILURE: {ae.message}")
        # Every 401 exposes the same message to clients
        raise AuthenticationError() from ae
    except Exception as e:
        print__token_debug(
            f"❌ AUTH EXCEPTION: Unexpected authentication error - {type(e).__name__}: {str(e)}"
        )
        print__token_debug(f"❌ AUTH TRACE: Full traceback:\n{traceback.format_exc()}")
        raise AuthenticationError() from e


def get_optional_user(request: Request):
    """Like get_current_user, but returns None instead of raising.

    Used by the server-rendered pages, which redirect rather than fail.
    """
    try:
        return get_current_user(request)
    except AuthenticationError:
        return None
