"""API routers package."""

from .vendor import router as vendor_router

__all__ = ["vendor_router"]
