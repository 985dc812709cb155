"""
Main API router for InterviewCoach

Aggregates all API routes and provides the main application router.
"""

from fastapi import APIRouter

from interview_coach.api.endpoints import interview, metadata

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(
    interview.router,
    prefix="/interview",
    tags=["Interview"]
)

api_router.include_router(
    metadata.router,
    prefix="/metadata",
    tags=["Metadata"]
)
