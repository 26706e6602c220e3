"""Health check endpoint for load balancers and uptime monitors."""

# Standard imports
import time
from datetime import datetime

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from mindgrid import __version__
from mindgrid.config.settings import start_time
from mindgrid.database.connection import check_connection_health, get_pool
from mindgrid.helpers import traceback_json_response

router = APIRouter()


@router.get("/health")
async def health_check():
    """Uptime plus a pooled ``SELECT 1``. Answers 503 when the database check fails.

    No authentication; monitoring tools call it directly.
    """
    try:
        database_healthy = True
        database_error = None
        pool = get_pool()
        mode = "pool" if pool is not None else "direct"

        if pool is not None:
            try:
                async with pool.connection() as conn:
                    database_healthy = await check_connection_health(conn)
            except Exception as e:
                database_healthy = False
                database_error = str(e)

        health_data = {
            "status": "healthy" if database_healthy else "degraded",
            "timestamp": datetime.now().isoformat(),
            "uptime_seconds": time.time() - start_time,
            "database": {
                "healthy": database_healthy,
                "mode": mode,
                "error": database_error,
            },
            "version": __version__,
        }

        if not database_healthy:
            return JSONResponse(status_code=503, content=health_data)
        return health_data

    except Exception as e:
        resp = traceback_json_response(e)
        if resp:
            return resp
        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "error": str(e),
                "timestamp": datetime.now().isoformat(),
            },
        )
