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

# Standard imports
import time

from mindgrid.utils.debug import print__db_debug

# ============================================================
# CONFIGURATION AND CONSTANTS
# ============================================================
# Application startup time for uptime tracking
start_time = time.time()
_APP_STARTUP_TIME = None

# Database connection tuning (Supabase pooler friendly)
CONNECT_TIMEOUT = int(os.environ.get("CONNECT_TIMEOUT", "30"))
TCP_USER_TIMEOUT = int(os.environ.get("TCP_USER_TIMEOUT", "60000"))  # ms
KEEPALIVES_IDLE = int(os.environ.get("KEEPALIVES_IDLE", "300"))
KEEPALIVES_INTERVAL = int(os.environ.get("KEEPALIVES_INTERVAL", "30"))
KEEPALIVES_COUNT = int(os.environ.get("KEEPALIVES_COUNT", "3"))

DEFAULT_POOL_MIN_SIZE = int(os.environ.get("DB_POOL_MIN_SIZE", "1"))
DEFAULT_POOL_MAX_SIZE = int(os.environ.get("DB_POOL_MAX_SIZE", "10"))
DEFAULT_POOL_TIMEOUT = int(os.environ.get("DB_POOL_TIMEOUT", "30"))
DEFAULT_MAX_IDLE = int(os.environ.get("DB_POOL_MAX_IDLE", "300"))
DEFAULT_MAX_LIFETIME = int(os.environ.get("DB_POOL_MAX_LIFETIME", "3600"))

# Supabase storage
STORAGE_BUCKET = os.environ.get("SUPABASE_STORAGE_BUCKET", "canvas-files")
STORAGE_CACHE_CONTROL = "3600"

# OpenAI models and limits
OPENAI_TEXT_MODEL = os.environ.get("OPENAI_TEXT_MODEL", "gpt-4-turbo-preview")
OPENAI_ANALYSIS_MODEL = os.environ.get("OPENAI_ANALYSIS_MODEL", "gpt-4o")
OPENAI_IMAGE_MODEL = os.environ.get("OPENAI_IMAGE_MODEL", "dall-e-3")
TEXT_TEMPERATURE = 0.7
TEXT_MAX_TOKENS = 1000
SUGGESTIONS_TEMPERATURE = 0.8
SUGGESTIONS_MAX_TOKENS = 2000
ANALYSIS_TEMPERATURE = 0.8
ANALYSIS_MAX_TOKENS = 2000

# Mind map analysis stages (analyze-content)
MINDMAP_TEMPERATURE = 0.3
MINDMAP_HEADLINES_MAX_TOKENS = 1500
MINDMAP_SECTIONS_MAX_TOKENS = 2000
MINDMAP_DETAILS_MAX_TOKENS = 2500
MINDMAP_CROSS_CUTTING_MAX_TOKENS = 2000
MINDMAP_LAYOUT_MAX_TOKENS = 500

# Outbound HTTP (image download, storage upload, remote token check)
HTTP_TIMEOUT_SECONDS = float(os.environ.get("HTTP_TIMEOUT_SECONDS", "60"))

# Uploads
UPLOAD_MAX_BYTES = 10 * 1024 * 1024
UPLOAD_ALLOWED_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/svg+xml",
}

# Session cookie set by the Supabase auth helpers in the browser
SESSION_COOKIE_NAME = os.environ.get("SESSION_COOKIE_NAME", "sb-access-token")
SUPABASE_JWT_AUDIENCE = "authenticated"

REQUIRED_ENV_VARS = [
    "SUPABASE_URL",
    "SUPABASE_SERVICE_ROLE_KEY",
    "user",
    "password",
    "host",
    "dbname",
]


# ============================================================
# ENVIRONMENT ACCESSORS
# ============================================================
# Read on every call so flags can change between requests and tests.
def get_supabase_url() -> str:
    return os.environ.get("SUPABASE_URL", "").rstrip("/")


def get_service_role_key() -> str:
    return os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "")


def get_jwt_secret() -> str:
    return os.environ.get("SUPABASE_JWT_SECRET", "")


def use_test_tokens() -> bool:
    return os.environ.get("USE_TEST_TOKENS", "0") == "1"


def debug_endpoints_enabled() -> bool:
    return os.environ.get("MINDGRID_DEBUG_ENDPOINTS", "0") == "1"


def get_db_config():
    """Get database configuration from environment variables.

    Returns:
        dict: user, password, host, port and dbname for the Supabase Postgres
        instance. Port defaults to 5432.
    """
    print__db_debug("DB CONFIG: reading database configuration from environment")
    config = {
        "user": os.environ.get("user"),
        "password": os.environ.get("password"),
        "host": os.environ.get("host"),
        "port": int(os.environ.get("port", 5432)),
        "dbname": os.environ.get("dbname"),
    }
    print__db_debug(
        f"DB CONFIG: host={config['host']} port={config['port']} dbname={config['dbname']}"
    )
    return config


def validate_required_settings():
    """Return the names of required environment variables that are unset."""
    missing = [name for name in REQUIRED_ENV_VARS if not os.environ.get(name)]
    if missing:
        print__db_debug(f"Missing required environment variables: {missing}")
    return missing
