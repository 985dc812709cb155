"""
API layer for InterviewCoach

Contains FastAPI routers for:
- Practice session management
- Reference metadata
"""

from interview_coach.api.router import api_router

__all__ = ["api_router"]
