"""
Health Check Endpoints

- /health/live  - process is up
- /health/ready - database reachable and tables created
"""

from fastapi import APIRouter, HTTPException, status
from datetime import datetime
from typing import Dict, Any
import time

from sqlalchemy import text

from campusdesk.core.config import settings
from campusdesk.core.database import get_session_local
from campusdesk.core.events import event_bus
from campusdesk.core.logging_config import logger


router = APIRouter(prefix="/health", tags=["Health Checks"])


async def check_database() -> Dict[str, Any]:
    """Check database connectivity and that the schema exists"""
    start = time.time()
    try:
        async with get_session_local()() as session:
            await session.execute(text("SELECT 1"))
            try:
                await session.execute(text("SELECT COUNT(*) FROM no_due_requests"))
                tables_ok = True
            except Exception:
                tables_ok = False

        return {
            "status": "healthy" if tables_ok else "degraded",
            "latency_ms": round((time.time() - start) * 1000, 2),
            "tables_ready": tables_ok,
        }
    except Exception as e:
        logger.error(f"[HealthCheck] Database check failed: {e}")
        return {
            "status": "unhealthy",
            "latency_ms": round((time.time() - start) * 1000, 2),
            "tables_ready": False,
            "error": str(e),
        }


@router.get("/live")
async def liveness_check():
    return {
        "status": "alive",
        "timestamp": datetime.utcnow().isoformat(),
    }


@router.get("/ready")
async def readiness_check():
    """503 until the database answers and the tables exist"""
    database = await check_database()
    body = {
        "status": "ready" if database["status"] == "healthy" else "not_ready",
        "environment": settings.ENVIRONMENT,
        "checks": {
            "database": database,
            "event_bus": event_bus.get_stats(),
        },
        "timestamp": datetime.utcnow().isoformat(),
    }
    if database["status"] != "healthy":
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=body)
    return body
