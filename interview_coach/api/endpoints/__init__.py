"""
API endpoint modules for InterviewCoach
"""

from interview_coach.api.endpoints import interview, metadata

__all__ = ["interview", "metadata"]
