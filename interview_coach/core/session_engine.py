"""
Session Engine - State machine for the practice session lifecycle.

This is the central coordinator for a practice interview. It creates
sessions, routes answers to the recorder, reconstructs where a user should
continue, and hands completed sessions to the aggregator.

No cursor is stored: the resumption position is always recomputed from which
questions have answers, so a request that died between recording an answer
and anything after it leaves nothing to repair.
"""

import logging

from interview_coach.config.settings import Settings, get_settings
from interview_coach.core.aggregator import Aggregator
from interview_coach.core.answer_recorder import AnswerRecorder
from interview_coach.core.errors import (
    InputValidationError,
    MalformedResponseError,
    NotFoundError,
    StateTransitionError,
)
from interview_coach.core.generation_gateway import GenerationGateway
from interview_coach.core.question_bank import QuestionBank
from interview_coach.core.session_store import SessionStore
from interview_coach.models.feedback import Feedback, OverallFeedback
from interview_coach.models.session import (
    PracticeSession,
    ResumeView,
    SessionState,
    SessionSummary,
)

logger = logging.getLogger(__name__)


class SessionEngine:
    """
    Manages the practice session lifecycle using a state machine pattern.

    States:
        CREATED → IN_PROGRESS → COMPLETED (terminal)

    The engine coordinates between:
    - Generation Gateway (questions, grading, summary)
    - Answer Recorder
    - Aggregator
    - Session Store
    """

    # Valid state transitions
    VALID_TRANSITIONS: dict[SessionState, list[SessionState]] = {
        SessionState.CREATED: [SessionState.IN_PROGRESS],
        SessionState.IN_PROGRESS: [SessionState.COMPLETED],
        SessionState.COMPLETED: [],  # Terminal state
    }

    def __init__(
        self,
        store: SessionStore,
        gateway: GenerationGateway,
        settings: Settings | None = None,
    ):
        """
        Initialize the engine with component dependencies.

        Args:
            store: Durable session store
            gateway: Generation gateway for questions, grading and summaries
            settings: Application settings (defaults to the cached settings)
        """
        self.settings = settings or get_settings()
        self.store = store
        self.gateway = gateway

        self.recorder = AnswerRecorder(
            store=store,
            gateway=gateway,
            revision_policy=self.settings.answer_revision_policy,
        )
        self.aggregator = Aggregator(store=store, gateway=gateway)

    async def close(self) -> None:
        """Release the gateway and store."""
        await self.gateway.close()
        await self.store.close()

    # =========================================================================
    # STATE MACHINE
    # =========================================================================

    def transition(self, session_id: str, old_state: SessionState, new_state: SessionState) -> None:
        """
        Validate a state transition.

        Raises:
            StateTransitionError: If transition is invalid
        """
        valid_next_states = self.VALID_TRANSITIONS.get(old_state, [])
        if new_state not in valid_next_states:
            raise StateTransitionError(
                f"Invalid transition from {old_state.value} to {new_state.value}. "
                f"Valid transitions: {[s.value for s in valid_next_states]}"
            )
        logger.info(f"Session {session_id}: {old_state.value} → {new_state.value}")

    # =========================================================================
    # SESSION MANAGEMENT
    # =========================================================================

    async def start_session(
        self,
        user_id: str,
        job_title: str,
        job_description: str,
        question_count: int,
    ) -> PracticeSession:
        """
        Create a new practice session with its full question set.

        Nothing is persisted unless question generation succeeds.

        Raises:
            InputValidationError: On empty job fields or a count outside the menu
            GenerationUnavailableError: If questions could not be generated
        """
        title = (job_title or "").strip()
        description = (job_description or "").strip()
        options = self.settings.question_count_options

        if not title:
            raise InputValidationError("job_title", "Job title is required")
        if not description:
            raise InputValidationError("job_description", "Job description is required")
        if (
            not isinstance(question_count, int)
            or isinstance(question_count, bool)
            or question_count not in options
        ):
            raise InputValidationError(
                "question_count",
                f"Number of questions must be one of {options}, got {question_count!r}",
            )

        logger.info(f"Starting session for user {user_id}: '{title}' with {question_count} questions")

        questions = await self.gateway.generate_questions(title, description, question_count)
        if len(questions) != question_count:
            raise MalformedResponseError(
                f"Expected {question_count} questions, got {len(questions)}"
            )

        session = await self.store.create_session(
            user_id=user_id,
            job_title=title,
            job_description=description,
            questions=questions,
        )
        self.transition(session.session_id, SessionState.CREATED, session.state)
        return session

    async def get_session(self, user_id: str, session_id: str) -> PracticeSession:
        """
        Get a session owned by the user.

        Raises:
            NotFoundError: If the session does not exist for this user
        """
        session = await self.store.get_session(session_id, user_id)
        if session is None:
            raise NotFoundError(f"Session not found: {session_id}")
        return session

    async def list_sessions(self, user_id: str) -> list[SessionSummary]:
        """List the user's sessions, most recent first."""
        return await self.store.list_sessions(user_id)

    # =========================================================================
    # INTERVIEW FLOW
    # =========================================================================

    async def get_questions(self, user_id: str, session_id: str) -> QuestionBank:
        """Get the session's questions in order, with any answers inlined."""
        session = await self.get_session(user_id, session_id)
        return await QuestionBank.load(self.store, session.session_id)

    async def submit_answer(
        self,
        user_id: str,
        session_id: str,
        question_id: str,
        text: str,
    ) -> Feedback:
        """Record an answer to one question and return its feedback."""
        session = await self.get_session(user_id, session_id)
        return await self.recorder.submit_answer(session, question_id, text)

    async def resume_session(self, user_id: str, session_id: str) -> ResumeView:
        """
        Work out where the user should continue.

        Scans questions in ordinal order for the first without an answer. When
        every question is answered the session is completed (aggregating if
        needed) and the completed view is returned.
        """
        session = await self.get_session(user_id, session_id)
        bank = await QuestionBank.load(self.store, session.session_id)

        next_question = bank.first_unanswered()
        if next_question is None:
            overall = await self._complete(session, bank)
            return ResumeView(
                session_id=session.session_id,
                state=SessionState.COMPLETED,
                total_questions=len(bank),
                answered_questions=bank.answered_count,
                overall_feedback=overall,
            )

        logger.info(
            f"Resuming session {session.session_id} at question "
            f"{next_question.ordinal + 1}/{len(bank)}"
        )
        return ResumeView(
            session_id=session.session_id,
            state=SessionState.IN_PROGRESS,
            total_questions=len(bank),
            answered_questions=bank.answered_count,
            position=next_question.ordinal,
            current_question=next_question,
        )

    async def overall_feedback(self, user_id: str, session_id: str) -> OverallFeedback:
        """
        Get the session's overall feedback, computing it if absent.

        Raises:
            SessionIncompleteError: If any question is still unanswered
        """
        session = await self.get_session(user_id, session_id)
        bank = await QuestionBank.load(self.store, session.session_id)
        return await self._complete(session, bank)

    async def _complete(self, session: PracticeSession, bank: QuestionBank) -> OverallFeedback:
        overall, completed_now = await self.aggregator.ensure_overall_feedback(session, bank)
        if completed_now:
            self.transition(session.session_id, session.state, SessionState.COMPLETED)
        return overall
