# CRITICAL: Set Windows event loop policy FIRST, before any other imports
# This must be the very first thing that happens to fix psycopg compatibility
import sys

if sys.platform == "win32":
    import asyncio

    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Load environment variables early
from dotenv import load_dotenv

load_dotenv()

import time

# Standard imports
import jwt
import requests

from mindgrid.config.settings import (
    HTTP_TIMEOUT_SECONDS,
    SUPABASE_JWT_AUDIENCE,
    get_jwt_secret,
    get_service_role_key,
    get_supabase_url,
    use_test_tokens,
)
from mindgrid.exceptions.errors import AuthenticationError
from mindgrid.utils.debug import print__token_debug

TEST_ISSUER = "test_issuer"


# ============================================================
# AUTHENTICATION - SUPABASE JWT VERIFICATION
# ============================================================
def verify_supabase_jwt(token: str):
    """Verify a Supabase access token and return its claims.

    Three paths, tried in order:

    1. Test tokens (``iss == "test_issuer"``), accepted only with
       ``USE_TEST_TOKENS=1``; signature is not checked, audience and expiry are.
    2. Local HS256 verification with ``SUPABASE_JWT_SECRET``.
    3. Without a secret, ask the Supabase auth server (``/auth/v1/user``).

    Returns:
        dict: claims including ``sub`` (the user id) and ``email``.

    Raises:
        AuthenticationError: on any verification failure.
    """
    try:
        token_parts = token.split(".")
        if len(token_parts) != 3 or not all(token_parts):
            raise AuthenticationError("Invalid JWT token format")

        try:
            unverified_payload = jwt.decode(token, options={"verify_signature": False})
        except jwt.DecodeError as e:
            print__token_debug(f"JWT decode error: {e}")
            raise AuthenticationError("Invalid JWT token format")

        print__token_debug(f"Token iss: {unverified_payload.get('iss')}")
        print__token_debug(f"Token aud: {unverified_payload.get('aud')}")

        # TEST MODE: only enabled when USE_TEST_TOKENS environment variable is "1"
        if unverified_payload.get("iss") == TEST_ISSUER:
            if not use_test_tokens():
                print__token_debug(
                    "🚫 TEST MODE DISABLED: test token detected - rejecting token"
                )
                raise AuthenticationError(
                    "Test tokens are not allowed in this environment"
                )
            if unverified_payload.get("aud") != SUPABASE_JWT_AUDIENCE:
                raise AuthenticationError("Invalid test token audience")
            if int(unverified_payload.get("exp", 0)) < time.time():
                raise AuthenticationError("Test token has expired")
            if not unverified_payload.get("sub"):
                raise AuthenticationError("Test token has no subject")
            print__token_debug("✅ TEST MODE: Test token validation successful")
            return unverified_payload

        secret = get_jwt_secret()
        if secret:
            try:
                payload = jwt.decode(
                    token,
                    secret,
                    algorithms=["HS256"],
                    audience=SUPABASE_JWT_AUDIENCE,
                )
            except jwt.ExpiredSignatureError:
                print__token_debug("JWT token has expired")
                raise AuthenticationError("Token has expired")
            except jwt.InvalidAudienceError:
                print__token_debug("JWT token has invalid audience")
                raise AuthenticationError("Invalid token audience")
            except jwt.InvalidSignatureError:
                print__token_debug("JWT token has invalid signature")
                raise AuthenticationError("Invalid token signature")
            except jwt.InvalidTokenError as e:
                print__token_debug(f"JWT token is invalid: {e}")
                raise AuthenticationError("Invalid token")
            if not payload.get("sub"):
                raise AuthenticationError("Token has no subject")
            print__token_debug("Local Supabase JWT verification successful")
            return payload

        return _verify_with_auth_server(token)

    except AuthenticationError:
        raise
    except requests.RequestException as e:
        print__token_debug(f"Failed to reach Supabase auth server: {e}")
        raise AuthenticationError("Token verification failed - unable to validate")
    except Exception as e:
        print__token_debug(f"JWT verification failed: {type(e).__name__}: {e}")
        raise AuthenticationError("Token verification failed")


def _verify_with_auth_server(token: str):
    supabase_url = get_supabase_url()
    if not supabase_url:
        raise AuthenticationError("Token verification failed - auth not configured")

    print__token_debug("Verifying token via Supabase /auth/v1/user")
    response = requests.get(
        f"{supabase_url}/auth/v1/user",
        headers={
            "Authorization": f"Bearer {token}",
            "apikey": get_service_role_key(),
        },
        timeout=HTTP_TIMEOUT_SECONDS,
    )
    if response.status_code != 200:
        print__token_debug(
            f"Supabase auth server returned error: {response.status_code} - {response.text}"
        )
        raise AuthenticationError("Invalid session token")

    user = response.json()
    if not user.get("id"):
        print__token_debug("Supabase auth server returned a user without an id")
        raise AuthenticationError("Token has no subject")
    # Normalize to the claim names used by the rest of the application
    return {"sub": user.get("id"), "email": user.get("email"), "user": user}
