"""
Health Check Endpoints

Provides health and readiness checks for orchestration systems.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from ecommerce_dashboard.config import get_settings
from ecommerce_dashboard.session import DashboardSession
from .dashboard import get_session

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check(session: DashboardSession = Depends(get_session)) -> HealthResponse:
    """
    Comprehensive health check endpoint.

    Reports the load status of the dashboard data.
    """
    settings = get_settings()
    data_check: Dict[str, Any] = {"status": session.status.value}
    if session.store is not None:
        data_check["records"] = len(session.store)
    if session.last_error is not None:
        data_check["error"] = str(session.last_error)

    return HealthResponse(
        status="healthy" if session.is_ready else "degraded",
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc),
        checks={"data": data_check},
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """
    Liveness probe endpoint.

    Returns 200 if the application is running.
    """
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(response: Response, session: DashboardSession = Depends(get_session)) -> Dict[str, str]:
    """
    Readiness probe endpoint.

    Returns 200 once the dashboard data is loaded.
    """
    if not session.is_ready:
        response.status_code = 503
        return {"status": "not_ready", "reason": session.status.value}
    return {"status": "ready"}
