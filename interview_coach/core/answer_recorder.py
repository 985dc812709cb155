"""
Answer Recorder for InterviewCoach

Records a user's answer to one question and obtains its feedback. Answer and
feedback are only ever persisted together, and each question is graded at
most once.
"""

import logging

from interview_coach.config.settings import AnswerRevisionPolicy
from interview_coach.core.errors import ConflictError, InputValidationError, NotFoundError
from interview_coach.core.generation_gateway import GenerationGateway
from interview_coach.core.locks import KeyedLock
from interview_coach.core.question_bank import QuestionBank
from interview_coach.core.session_store import SessionStore
from interview_coach.models.feedback import Feedback
from interview_coach.models.question import Answer
from interview_coach.models.session import PracticeSession

logger = logging.getLogger(__name__)


class AnswerRecorder:
    """
    Accepts answers and requests grading for them.

    Same-question submissions are serialised in-process with a keyed lock;
    across processes the store's one-answer-per-question key decides the
    winner.
    """

    def __init__(
        self,
        store: SessionStore,
        gateway: GenerationGateway,
        revision_policy: AnswerRevisionPolicy = AnswerRevisionPolicy.REJECT,
    ):
        self.store = store
        self.gateway = gateway
        self.revision_policy = revision_policy
        self._locks = KeyedLock()

    async def submit_answer(
        self,
        session: PracticeSession,
        question_id: str,
        text: str,
    ) -> Feedback:
        """
        Record an answer and return its feedback.

        Args:
            session: Session the question belongs to (already ownership-checked)
            question_id: Question being answered
            text: The user's answer

        Returns:
            Feedback for the answer

        Raises:
            InputValidationError: If the answer is empty
            NotFoundError: If the question is not part of the session
            ConflictError: If the question was already answered (REJECT policy)
            GenerationUnavailableError: If grading failed; nothing is stored
        """
        cleaned = (text or "").strip()
        if not cleaned:
            raise InputValidationError("answer", "Answer must not be empty")

        if question_id not in session.question_ids:
            raise NotFoundError(f"Question {question_id} not found in session {session.session_id}")

        async with self._locks.hold(question_id):
            bank = await QuestionBank.load(self.store, session.session_id)
            question = bank.get(question_id)
            if question is None:
                raise NotFoundError(f"Question {question_id} not found in session {session.session_id}")

            if question.answer is not None:
                return self._resubmission(question.answer)

            feedback = await self.gateway.grade_answer(
                job_title=session.job_title,
                job_description=session.job_description,
                question=question.text,
                answer_text=cleaned,
            )

            try:
                answer = await self.store.record_answer(question_id, cleaned, feedback)
            except ConflictError:
                logger.warning(f"Question {question_id} was answered concurrently by another request")
                existing = await self.store.get_answer(question_id)
                if existing is None:
                    raise
                return self._resubmission(existing)

        logger.info(
            f"Session {session.session_id}: recorded answer for question #{question.ordinal + 1} "
            f"(score={answer.feedback.score:g})"
        )
        return answer.feedback

    def _resubmission(self, existing: Answer) -> Feedback:
        """Apply the revision policy to a second answer for the same question."""
        if self.revision_policy == AnswerRevisionPolicy.KEEP_FIRST:
            logger.info(f"Question {existing.question_id} already answered, returning first feedback")
            return existing.feedback

        raise ConflictError(
            f"Question {existing.question_id} has already been answered and cannot be changed"
        )
