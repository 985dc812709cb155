"""
Aggregator for InterviewCoach

Turns a completed session's per-question feedback into the overall
assessment:
- Average score (one decimal)
- Readiness tier
- Summary, top strengths/improvements and recommendations
"""

import logging
from decimal import ROUND_HALF_UP, Decimal

from interview_coach.core.errors import PersistenceError, SessionIncompleteError
from interview_coach.core.generation_gateway import GenerationGateway
from interview_coach.core.locks import KeyedLock
from interview_coach.core.question_bank import QuestionBank
from interview_coach.core.session_store import SessionStore, utcnow
from interview_coach.models.feedback import OverallFeedback, ReadinessTier
from interview_coach.models.session import PracticeSession

logger = logging.getLogger(__name__)


# Policy constant: fixed thresholds on the rounded average, highest first.
# Not derived from data.
READINESS_THRESHOLDS: tuple[tuple[float, ReadinessTier], ...] = (
    (8.5, ReadinessTier.HIGHLY_READY),
    (7.0, ReadinessTier.READY),
    (5.0, ReadinessTier.NEEDS_WORK),
)
LOWEST_TIER = ReadinessTier.NOT_READY


def average_score(scores: list[float]) -> float:
    """Arithmetic mean rounded half-up to one decimal."""
    if not scores:
        raise ValueError("Cannot average an empty score list")

    total = sum(Decimal(str(score)) for score in scores)
    mean = total / Decimal(len(scores))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def readiness_for(score: float) -> ReadinessTier:
    """Map an average score to its readiness tier."""
    for threshold, tier in READINESS_THRESHOLDS:
        if score >= threshold:
            return tier
    return LOWEST_TIER


class Aggregator:
    """
    Computes and persists the overall feedback of a session exactly once.

    A per-session lock stops a second summary call within this process; the
    store's check-and-set on the completion flag decides between processes.
    """

    def __init__(self, store: SessionStore, gateway: GenerationGateway):
        self.store = store
        self.gateway = gateway
        self._locks = KeyedLock()

    async def ensure_overall_feedback(
        self,
        session: PracticeSession,
        bank: QuestionBank,
    ) -> tuple[OverallFeedback, bool]:
        """
        Return the session's overall feedback, computing it if absent.

        The flag is True only for the call that completed the session.

        Raises:
            SessionIncompleteError: If any question is still unanswered
            GenerationUnavailableError: If summarization failed; nothing is stored
        """
        if session.is_completed:
            return await self._stored(session.session_id), False

        if not bank.is_complete:
            remaining = len(bank) - bank.answered_count
            raise SessionIncompleteError(
                f"{remaining} of {len(bank)} questions still need an answer"
            )

        async with self._locks.hold(session.session_id):
            existing = await self.store.get_overall_feedback(session.session_id)
            if existing is not None:
                return existing, False

            feedback = bank.feedback_set()
            average = average_score([item.score for item in feedback])
            readiness = readiness_for(average)
            logger.info(
                f"Aggregating session {session.session_id}: "
                f"average={average:.1f}, readiness={readiness.value}"
            )

            draft = await self.gateway.summarize(
                job_title=session.job_title,
                job_description=session.job_description,
                feedback=feedback,
            )

            overall = OverallFeedback(
                session_id=session.session_id,
                average_score=average,
                readiness=readiness,
                summary=draft.summary,
                top_strengths=draft.top_strengths,
                top_improvements=draft.top_improvements,
                recommendations=draft.recommendations,
                generated_at=utcnow(),
            )
            return await self.store.complete_session(overall)

    async def _stored(self, session_id: str) -> OverallFeedback:
        overall = await self.store.get_overall_feedback(session_id)
        if overall is None:
            # Completion and overall feedback are written in one transaction
            raise PersistenceError(f"Completed session {session_id} has no overall feedback")
        return overall
