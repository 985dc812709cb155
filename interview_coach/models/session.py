"""
Practice session and state models for InterviewCoach
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from interview_coach.models.feedback import OverallFeedback
from interview_coach.models.question import Question


class SessionState(str, Enum):
    """Session state machine states."""

    CREATED = "created"  # Questions requested, not yet returned
    IN_PROGRESS = "in_progress"  # Some or no questions answered
    COMPLETED = "completed"  # Terminal


class PracticeSession(BaseModel):
    """One practice-interview attempt for a specific job."""

    # Identification
    session_id: str
    user_id: str

    # Job context
    job_title: str
    job_description: str

    # Questions (order fixed at creation)
    question_count: int = Field(..., ge=1)
    question_ids: list[str] = Field(default_factory=list)

    # Timing
    created_at: datetime
    completed_at: datetime | None = None

    # State
    is_completed: bool = False

    @property
    def state(self) -> SessionState:
        """State derived from persisted data."""
        if self.is_completed:
            return SessionState.COMPLETED
        if self.question_ids:
            return SessionState.IN_PROGRESS
        return SessionState.CREATED


class SessionSummary(BaseModel):
    """Condensed session entry for the history list."""

    session_id: str
    job_title: str
    total_questions: int
    answered_questions: int
    is_completed: bool
    created_at: datetime


class ResumeView(BaseModel):
    """Where a user should continue in a session."""

    session_id: str
    state: SessionState
    total_questions: int
    answered_questions: int
    position: int | None = Field(
        default=None,
        description="Ordinal of the first unanswered question, None when complete"
    )
    current_question: Question | None = None
    overall_feedback: OverallFeedback | None = None
