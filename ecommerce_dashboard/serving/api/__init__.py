"""
API Module
"""
from .middleware import RequestLoggingMiddleware
from .routes import dashboard_router, health_router

__all__ = [
    "RequestLoggingMiddleware",
    "dashboard_router",
    "health_router",
]
