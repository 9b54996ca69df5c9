"""
Main API router

Aggregates all API routes and provides the main application router.
"""

from fastapi import APIRouter

from src.api.endpoints import sessions

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(
    sessions.router,
    prefix="/sessions",
    tags=["Sessions"]
)
