"""
API Router
Main router for all VTN endpoints
"""

from fastapi import APIRouter
from vtn.api.endpoints import auth, events, health, programs, reports, resources, vens

api_router = APIRouter()

# Authentication endpoints
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["authentication"]
)

# Program endpoints
api_router.include_router(
    programs.router,
    prefix="/programs",
    tags=["programs"]
)

# Event endpoints
api_router.include_router(
    events.router,
    prefix="/events",
    tags=["events"]
)

# Report endpoints
api_router.include_router(
    reports.router,
    prefix="/reports",
    tags=["reports"]
)

# VEN endpoints
api_router.include_router(
    vens.router,
    prefix="/vens",
    tags=["vens"]
)

# Resource endpoints, scoped to their VEN
api_router.include_router(
    resources.router,
    prefix="/vens/{venID}/resources",
    tags=["resources"]
)

# Health check endpoints
api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"]
)
