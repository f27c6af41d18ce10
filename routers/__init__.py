# routers/__init__.py

from .data_visibility import router as data_visibility_router
from .health import router as health_router

__all__ = [
    "data_visibility_router",
    "health_router",
]
