"""
Feedback models for InterviewCoach

Per-question feedback produced by grading, and the overall readiness
assessment produced once a session is complete.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ReadinessTier(str, Enum):
    """Ordered readiness tiers, lowest first."""

    NOT_READY = "Not Ready"
    NEEDS_WORK = "Needs Work"
    READY = "Ready"
    HIGHLY_READY = "Highly Ready"

    @property
    def rank(self) -> int:
        """Position of the tier in the ordering (0 = lowest)."""
        return list(ReadinessTier).index(self)

    @property
    def description(self) -> str:
        """Tier description."""
        descriptions = {
            "Highly Ready": "Consistently strong answers. You are well prepared for this role.",
            "Ready": "Solid answers overall with a few areas to polish.",
            "Needs Work": "Some good answers, but important gaps remain.",
            "Not Ready": "Significant preparation is needed before interviewing.",
        }
        return descriptions.get(self.value, "")


class Feedback(BaseModel):
    """Grading result for a single answer."""

    score: float = Field(
        ..., ge=0, le=10,
        description="Score on a 0-10 scale"
    )
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)

    @property
    def score_label(self) -> str:
        """Short encouragement shown alongside the score."""
        if self.score >= 8:
            return "Excellent!"
        elif self.score >= 6:
            return "Good job!"
        elif self.score >= 4:
            return "Room for improvement"
        else:
            return "Keep practicing!"


class SummaryDraft(BaseModel):
    """Narrative part of the overall feedback, as returned by the generator."""

    summary: str
    top_strengths: list[str] = Field(default_factory=list)
    top_improvements: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class OverallFeedback(BaseModel):
    """Aggregate assessment of a completed session."""

    session_id: str
    average_score: float = Field(..., ge=0, le=10)
    readiness: ReadinessTier
    summary: str
    top_strengths: list[str] = Field(default_factory=list)
    top_improvements: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    generated_at: datetime
