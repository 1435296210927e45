"""
API v1 router.

Aggregates all v1 endpoints.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import teams, training

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(
    teams.router, prefix="/teams", tags=["Teams"]
)
api_router.include_router(
    training.router,
    prefix="/training/sessions",
    tags=["Training sessions"],
)
