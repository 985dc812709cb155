"""
Session Store for InterviewCoach

Durable storage for sessions, question banks, answers and overall feedback,
backed by SQLAlchemy's async engine (SQLite by default).

Each unit that must never be half-written is a single transaction:
- session + all of its questions
- answer + its feedback
- overall feedback + the completion flag
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
    select,
    update,
)
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from interview_coach.core.errors import ConflictError, PersistenceError
from interview_coach.models.feedback import Feedback, OverallFeedback, ReadinessTier
from interview_coach.models.question import Answer, GeneratedQuestion, Question
from interview_coach.models.session import PracticeSession, SessionSummary

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Naive UTC timestamp, the form SQLite hands back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ============================================================================
# TABLES
# ============================================================================

class Base(DeclarativeBase):
    pass


class SessionRecord(Base):
    __tablename__ = "interview_sessions"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), unique=True, nullable=False, index=True)
    user_id = Column(String(128), nullable=False, index=True)
    job_title = Column(String(255), nullable=False)
    job_description = Column(Text, nullable=False)
    question_count = Column(Integer, nullable=False)
    is_completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False)
    completed_at = Column(DateTime)


class QuestionRecord(Base):
    __tablename__ = "interview_questions"
    __table_args__ = (UniqueConstraint("session_id", "ordinal"),)

    id = Column(String(40), primary_key=True)
    session_id = Column(String(36), ForeignKey("interview_sessions.id"), nullable=False, index=True)
    ordinal = Column(Integer, nullable=False)
    text = Column(Text, nullable=False)
    category = Column(String(64), nullable=False)


class AnswerRecord(Base):
    __tablename__ = "interview_answers"

    # One answer per question: the primary key is the question itself
    question_id = Column(String(40), ForeignKey("interview_questions.id"), primary_key=True)
    text = Column(Text, nullable=False)
    score = Column(Float, nullable=False)
    strengths = Column(JSON, nullable=False)
    weaknesses = Column(JSON, nullable=False)
    suggestions = Column(JSON, nullable=False)
    answered_at = Column(DateTime, nullable=False)


class OverallFeedbackRecord(Base):
    __tablename__ = "interview_overall_feedback"

    session_id = Column(String(36), ForeignKey("interview_sessions.id"), primary_key=True)
    average_score = Column(Float, nullable=False)
    readiness = Column(String(32), nullable=False)
    summary = Column(Text, nullable=False)
    top_strengths = Column(JSON, nullable=False)
    top_improvements = Column(JSON, nullable=False)
    recommendations = Column(JSON, nullable=False)
    generated_at = Column(DateTime, nullable=False)


# ============================================================================
# STORE
# ============================================================================

class SessionStore:
    """
    Async persistence layer for practice sessions.

    Read methods return pydantic models; records never leak out of this module.
    """

    def __init__(self, database_url: str):
        self.database_url = database_url
        url = make_url(database_url)

        engine_kwargs = {}
        if url.get_backend_name() == "sqlite":
            # File connections are cheap and must not be shared across event loops
            engine_kwargs["poolclass"] = NullPool
            if url.database and url.database != ":memory:":
                directory = os.path.dirname(url.database) or "."
                os.makedirs(directory, exist_ok=True)

        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._sessionmaker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def create_all(self) -> None:
        """Create tables if they don't exist."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        """Dispose of pooled connections."""
        await self.engine.dispose()

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        """Yield a session inside a transaction, committed on clean exit."""
        async with self._sessionmaker() as db:
            try:
                async with db.begin():
                    yield db
            except IntegrityError:
                raise
            except SQLAlchemyError as e:
                logger.error(f"Session store transaction failed: {e}")
                raise PersistenceError("The session store is unavailable. Please try again.") from e

    # =========================================================================
    # SESSIONS
    # =========================================================================

    async def create_session(
        self,
        user_id: str,
        job_title: str,
        job_description: str,
        questions: list[GeneratedQuestion],
    ) -> PracticeSession:
        """Persist a session together with its question bank."""
        session_id = str(uuid4())
        created_at = utcnow()

        session_record = SessionRecord(
            id=session_id,
            user_id=user_id,
            job_title=job_title,
            job_description=job_description,
            question_count=len(questions),
            is_completed=False,
            created_at=created_at,
        )
        question_records = [
            QuestionRecord(
                id=f"q_{uuid4().hex}",
                session_id=session_id,
                ordinal=ordinal,
                text=question.text,
                category=question.category,
            )
            for ordinal, question in enumerate(questions)
        ]

        try:
            async with self._transaction() as db:
                db.add(session_record)
                db.add_all(question_records)
        except IntegrityError as e:
            raise PersistenceError(f"Could not create session: {e.orig}") from e

        return PracticeSession(
            session_id=session_id,
            user_id=user_id,
            job_title=job_title,
            job_description=job_description,
            question_count=len(questions),
            question_ids=[record.id for record in question_records],
            created_at=created_at,
        )

    async def get_session(self, session_id: str, user_id: str) -> PracticeSession | None:
        """Get a session owned by ``user_id``, or None."""
        async with self._transaction() as db:
            record = (await db.execute(
                select(SessionRecord).where(
                    SessionRecord.id == session_id,
                    SessionRecord.user_id == user_id,
                )
            )).scalar_one_or_none()
            if record is None:
                return None

            question_ids = (await db.execute(
                select(QuestionRecord.id)
                .where(QuestionRecord.session_id == session_id)
                .order_by(QuestionRecord.ordinal)
            )).scalars().all()

        return PracticeSession(
            session_id=record.id,
            user_id=record.user_id,
            job_title=record.job_title,
            job_description=record.job_description,
            question_count=record.question_count,
            question_ids=list(question_ids),
            created_at=record.created_at,
            completed_at=record.completed_at,
            is_completed=record.is_completed,
        )

    async def list_sessions(self, user_id: str) -> list[SessionSummary]:
        """List a user's sessions, most recent first."""
        answered = (
            select(
                QuestionRecord.session_id.label("session_id"),
                func.count(AnswerRecord.question_id).label("answered"),
            )
            .join(AnswerRecord, AnswerRecord.question_id == QuestionRecord.id)
            .group_by(QuestionRecord.session_id)
            .subquery()
        )
        stmt = (
            select(SessionRecord, func.coalesce(answered.c.answered, 0))
            .outerjoin(answered, answered.c.session_id == SessionRecord.id)
            .where(SessionRecord.user_id == user_id)
            .order_by(SessionRecord.created_at.desc(), SessionRecord.pk.desc())
        )

        async with self._transaction() as db:
            rows = (await db.execute(stmt)).all()

        return [
            SessionSummary(
                session_id=record.id,
                job_title=record.job_title,
                total_questions=record.question_count,
                answered_questions=answered_count,
                is_completed=record.is_completed,
                created_at=record.created_at,
            )
            for record, answered_count in rows
        ]

    # =========================================================================
    # QUESTIONS & ANSWERS
    # =========================================================================

    async def get_questions(self, session_id: str) -> list[Question]:
        """Get a session's questions in ordinal order, answers inlined."""
        stmt = (
            select(QuestionRecord, AnswerRecord)
            .outerjoin(AnswerRecord, AnswerRecord.question_id == QuestionRecord.id)
            .where(QuestionRecord.session_id == session_id)
            .order_by(QuestionRecord.ordinal)
        )
        async with self._transaction() as db:
            rows = (await db.execute(stmt)).all()

        return [
            Question(
                id=question.id,
                session_id=question.session_id,
                ordinal=question.ordinal,
                text=question.text,
                category=question.category,
                answer=_to_answer(answer) if answer is not None else None,
            )
            for question, answer in rows
        ]

    async def get_answer(self, question_id: str) -> Answer | None:
        async with self._transaction() as db:
            record = await db.get(AnswerRecord, question_id)
        return _to_answer(record) if record is not None else None

    async def record_answer(self, question_id: str, text: str, feedback: Feedback) -> Answer:
        """
        Persist an answer together with its feedback.

        Raises:
            ConflictError: If the question already has an answer
        """
        record = AnswerRecord(
            question_id=question_id,
            text=text,
            score=feedback.score,
            strengths=list(feedback.strengths),
            weaknesses=list(feedback.weaknesses),
            suggestions=list(feedback.suggestions),
            answered_at=utcnow(),
        )
        try:
            async with self._transaction() as db:
                db.add(record)
        except IntegrityError as e:
            raise ConflictError(f"Question {question_id} has already been answered") from e

        return _to_answer(record)

    # =========================================================================
    # COMPLETION
    # =========================================================================

    async def get_overall_feedback(self, session_id: str) -> OverallFeedback | None:
        async with self._transaction() as db:
            record = await db.get(OverallFeedbackRecord, session_id)
        return _to_overall(record) if record is not None else None

    async def complete_session(self, overall: OverallFeedback) -> tuple[OverallFeedback, bool]:
        """
        Mark a session complete and store its overall feedback.

        The completion flag is flipped with a single conditional update, so
        only the first caller writes. Every caller gets the stored record back,
        along with whether this call was the one that completed the session.
        """
        async with self._transaction() as db:
            result = await db.execute(
                update(SessionRecord)
                .where(
                    SessionRecord.id == overall.session_id,
                    SessionRecord.is_completed.is_(False),
                )
                .values(is_completed=True, completed_at=overall.generated_at)
            )
            won = result.rowcount == 1
            if won:
                db.add(OverallFeedbackRecord(
                    session_id=overall.session_id,
                    average_score=overall.average_score,
                    readiness=overall.readiness.value,
                    summary=overall.summary,
                    top_strengths=list(overall.top_strengths),
                    top_improvements=list(overall.top_improvements),
                    recommendations=list(overall.recommendations),
                    generated_at=overall.generated_at,
                ))

        if won:
            logger.info(f"Session {overall.session_id} marked complete")
        else:
            logger.info(f"Session {overall.session_id} was already completed by another request")

        stored = await self.get_overall_feedback(overall.session_id)
        if stored is None:
            raise PersistenceError(f"Overall feedback missing for completed session {overall.session_id}")
        return stored, won


# ============================================================================
# CONVERSION HELPERS
# ============================================================================

def _to_answer(record: AnswerRecord) -> Answer:
    return Answer(
        question_id=record.question_id,
        text=record.text,
        feedback=Feedback(
            score=record.score,
            strengths=record.strengths,
            weaknesses=record.weaknesses,
            suggestions=record.suggestions,
        ),
        answered_at=record.answered_at,
    )


def _to_overall(record: OverallFeedbackRecord) -> OverallFeedback:
    return OverallFeedback(
        session_id=record.session_id,
        average_score=record.average_score,
        readiness=ReadinessTier(record.readiness),
        summary=record.summary,
        top_strengths=record.top_strengths,
        top_improvements=record.top_improvements,
        recommendations=record.recommendations,
        generated_at=record.generated_at,
    )
