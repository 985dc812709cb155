"""
Interview API endpoints

Handles the practice session lifecycle:
- Starting sessions
- Listing session history
- Fetching questions and submitting answers
- Resuming sessions and fetching overall feedback

Engine errors are translated to HTTP responses by the handler in main.py.
"""

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from interview_coach.api.dependencies import get_engine, get_user_id
from interview_coach.core.session_engine import SessionEngine
from interview_coach.models.feedback import Feedback, OverallFeedback
from interview_coach.models.question import Question
from interview_coach.models.session import ResumeView, SessionSummary

router = APIRouter()


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class StartRequest(BaseModel):
    """Request model for starting a practice session."""
    job_title: str
    job_description: str
    num_questions: int | None = None


class StartResponse(BaseModel):
    """Response after starting a session."""
    session_id: str
    total_questions: int
    message: str


class SubmitAnswerRequest(BaseModel):
    """Request model for submitting an answer."""
    question_id: str
    answer: str


class FeedbackResponse(BaseModel):
    """Grading result for one answer."""
    score: float
    score_label: str
    strengths: list[str]
    weaknesses: list[str]
    suggestions: list[str]

    @classmethod
    def from_feedback(cls, feedback: Feedback) -> "FeedbackResponse":
        return cls(
            score=feedback.score,
            score_label=feedback.score_label,
            strengths=feedback.strengths,
            weaknesses=feedback.weaknesses,
            suggestions=feedback.suggestions,
        )


class AnswerItem(BaseModel):
    """A recorded answer with its feedback."""
    text: str
    answered_at: datetime
    feedback: FeedbackResponse


class QuestionItem(BaseModel):
    """A question as shown to the client."""
    id: str
    ordinal: int
    text: str
    category: str
    answer: AnswerItem | None = None

    @classmethod
    def from_question(cls, question: Question) -> "QuestionItem":
        answer = None
        if question.answer is not None:
            answer = AnswerItem(
                text=question.answer.text,
                answered_at=question.answer.answered_at,
                feedback=FeedbackResponse.from_feedback(question.answer.feedback),
            )
        return cls(
            id=question.id,
            ordinal=question.ordinal,
            text=question.text,
            category=question.category,
            answer=answer,
        )


class QuestionsResponse(BaseModel):
    """Ordered questions of a session."""
    session_id: str
    total_questions: int
    answered_questions: int
    questions: list[QuestionItem]


class ResumeResponse(BaseModel):
    """Where to continue a session."""
    session_id: str
    state: str
    total_questions: int
    answered_questions: int
    position: int | None = None
    current_question: QuestionItem | None = None
    overall_feedback: OverallFeedback | None = None

    @classmethod
    def from_view(cls, view: ResumeView) -> "ResumeResponse":
        return cls(
            session_id=view.session_id,
            state=view.state.value,
            total_questions=view.total_questions,
            answered_questions=view.answered_questions,
            position=view.position,
            current_question=(
                QuestionItem.from_question(view.current_question)
                if view.current_question else None
            ),
            overall_feedback=view.overall_feedback,
        )


# ============================================================================
# REST ENDPOINTS
# ============================================================================

@router.post("/start", response_model=StartResponse)
async def start_session(
    request: StartRequest,
    user_id: str = Depends(get_user_id),
    engine: SessionEngine = Depends(get_engine),
) -> StartResponse:
    """
    Create a new practice session.

    Generates the full question set for the job before returning.
    """
    question_count = request.num_questions
    if question_count is None:
        question_count = engine.settings.default_question_count

    session = await engine.start_session(
        user_id=user_id,
        job_title=request.job_title,
        job_description=request.job_description,
        question_count=question_count,
    )

    return StartResponse(
        session_id=session.session_id,
        total_questions=session.question_count,
        message="Practice session created. Fetch the questions to begin.",
    )


@router.get("/sessions", response_model=list[SessionSummary])
async def list_sessions(
    user_id: str = Depends(get_user_id),
    engine: SessionEngine = Depends(get_engine),
) -> list[SessionSummary]:
    """Get the caller's session history, most recent first."""
    return await engine.list_sessions(user_id)


@router.get("/{session_id}/questions", response_model=QuestionsResponse)
async def get_questions(
    session_id: str,
    user_id: str = Depends(get_user_id),
    engine: SessionEngine = Depends(get_engine),
) -> QuestionsResponse:
    """Get the session's questions in order, with any answers inlined."""
    bank = await engine.get_questions(user_id, session_id)

    return QuestionsResponse(
        session_id=session_id,
        total_questions=len(bank),
        answered_questions=bank.answered_count,
        questions=[QuestionItem.from_question(q) for q in bank],
    )


@router.post("/{session_id}/answer", response_model=FeedbackResponse)
async def submit_answer(
    session_id: str,
    request: SubmitAnswerRequest,
    user_id: str = Depends(get_user_id),
    engine: SessionEngine = Depends(get_engine),
) -> FeedbackResponse:
    """
    Submit an answer to one question.

    The answer is graded before the response is returned.
    """
    feedback = await engine.submit_answer(
        user_id=user_id,
        session_id=session_id,
        question_id=request.question_id,
        text=request.answer,
    )
    return FeedbackResponse.from_feedback(feedback)


@router.get("/{session_id}/resume", response_model=ResumeResponse)
async def resume_session(
    session_id: str,
    user_id: str = Depends(get_user_id),
    engine: SessionEngine = Depends(get_engine),
) -> ResumeResponse:
    """Get the first unanswered question, or the results if all are answered."""
    view = await engine.resume_session(user_id, session_id)
    return ResumeResponse.from_view(view)


@router.get("/{session_id}/feedback", response_model=OverallFeedback)
async def get_overall_feedback(
    session_id: str,
    user_id: str = Depends(get_user_id),
    engine: SessionEngine = Depends(get_engine),
) -> OverallFeedback:
    """
    Get the overall feedback for a session.

    Computed on first request once every question is answered.
    """
    return await engine.overall_feedback(user_id, session_id)
