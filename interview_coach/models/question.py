"""
Question models for InterviewCoach
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from interview_coach.models.feedback import Feedback

DEFAULT_CATEGORY = "general"


class GeneratedQuestion(BaseModel):
    """A question as produced by the generation service, before persistence."""

    text: str = Field(..., min_length=1, description="The question text")
    category: str = Field(
        default=DEFAULT_CATEGORY,
        description="Open-ended category tag, e.g. behavioral or technical"
    )

    @field_validator("text")
    @classmethod
    def _strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("question text must not be empty")
        return value

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value: object) -> str:
        if not isinstance(value, str) or not value.strip():
            return DEFAULT_CATEGORY
        return value.strip().lower()


class Answer(BaseModel):
    """A user's answer to one question, with its feedback."""

    question_id: str
    text: str
    feedback: Feedback
    answered_at: datetime


class Question(BaseModel):
    """A single question inside a practice session."""

    id: str
    session_id: str
    ordinal: int = Field(..., ge=0, description="Presentation order within the session")
    text: str
    category: str = DEFAULT_CATEGORY
    answer: Answer | None = None

    @property
    def is_answered(self) -> bool:
        return self.answer is not None
