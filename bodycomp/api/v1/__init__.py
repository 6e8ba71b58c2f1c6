"""API v1 router aggregation."""

from fastapi import APIRouter

from bodycomp.api.v1.endpoints import (
    goals,
    health,
    insights,
    measurements,
    profile,
    tools,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(measurements.router, prefix="/measurements", tags=["measurements"])
api_router.include_router(goals.router, prefix="/goals", tags=["goals"])
api_router.include_router(profile.router, prefix="/profile", tags=["profile"])
api_router.include_router(insights.router, prefix="/insights", tags=["insights"])
api_router.include_router(tools.router, prefix="/tools", tags=["tools"])
