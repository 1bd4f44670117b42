"""API v1 router aggregation.

This module combines all v1 API routers into a single router
that can be mounted on the main FastAPI application.
"""

from fastapi import APIRouter

from .carriers import router as carriers_router

# Create main v1 router
router = APIRouter(prefix="/api/v1")

router.include_router(carriers_router, prefix="/carriers", tags=["carriers"])


__all__ = ["router"]
