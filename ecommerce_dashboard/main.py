"""
FastAPI Application

Main entry point for the E-Commerce Dashboard API.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import structlog
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from ecommerce_dashboard.config import get_settings
from ecommerce_dashboard.config.logging import configure_logging
from ecommerce_dashboard.serving.api import RequestLoggingMiddleware, dashboard_router, health_router
from ecommerce_dashboard.session import DashboardSession
from ecommerce_dashboard.store import LoadError

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()
    settings = get_settings()
    session: DashboardSession = app.state.session

    logger.info("Starting E-Commerce Dashboard API", environment=settings.app_env)

    if not session.is_ready:
        try:
            session.load_from_path(settings.data.payload_path)
        except LoadError as e:
            # Served as 503 until a successful reload
            logger.warning("Dashboard data unavailable", error=str(e))

    yield

    logger.info("Shutting down...")


def create_app(session: Optional[DashboardSession] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        session: Dashboard session to serve (a new one by default)

    Returns:
        Configured FastAPI app instance
    """
    settings = get_settings()
    app = FastAPI(
        title="E-Commerce Dashboard API",
        description="Filter-aware aggregation API for the e-commerce dashboard",
        version=settings.version,
        debug=settings.debug,
        # No interactive docs in production
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
        openapi_url=None if settings.is_production else "/openapi.json",
        lifespan=lifespan,
    )
    app.state.session = session or DashboardSession(settings.engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(dashboard_router, prefix="/api/v1/dashboard", tags=["Dashboard"])

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Prometheus scrape endpoint."""
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/api/v1/info")
    async def api_info():
        """API information endpoint."""
        return {
            "name": "E-Commerce Dashboard API",
            "version": settings.version,
            "environment": settings.app_env,
            "documentation": None if settings.is_production else "/docs",
        }

    return app


app = create_app()


def run() -> None:
    """Serve the API with uvicorn using the configured host and port"""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "ecommerce_dashboard.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.monitoring.log_level.lower(),
    )


if __name__ == "__main__":
    run()
