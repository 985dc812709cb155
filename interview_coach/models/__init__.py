"""
Data models and schemas for InterviewCoach

Contains Pydantic models for:
- Practice sessions and resumption views
- Questions and answers
- Per-question and overall feedback
"""

from interview_coach.models.session import (
    PracticeSession,
    ResumeView,
    SessionState,
    SessionSummary,
)
from interview_coach.models.question import Answer, GeneratedQuestion, Question
from interview_coach.models.feedback import (
    Feedback,
    OverallFeedback,
    ReadinessTier,
    SummaryDraft,
)

__all__ = [
    # Session
    "PracticeSession",
    "ResumeView",
    "SessionState",
    "SessionSummary",
    # Question
    "Answer",
    "GeneratedQuestion",
    "Question",
    # Feedback
    "Feedback",
    "OverallFeedback",
    "ReadinessTier",
    "SummaryDraft",
]
