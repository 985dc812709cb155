import asyncio
import logging

import pytest

from conftest import JOB_DESCRIPTION, JOB_TITLE
from interview_coach.core.errors import (
    GenerationUnavailableError,
    InputValidationError,
    NotFoundError,
    SessionIncompleteError,
)
from interview_coach.models.feedback import ReadinessTier
from interview_coach.models.session import SessionState


def answer(engine, session, ordinal, text="I would start by measuring.", user_id="user-1"):
    return asyncio.run(engine.submit_answer(
        user_id, session.session_id, session.question_ids[ordinal], text
    ))


# ============================================================================
# START
# ============================================================================

def test_start_session_persists_all_questions(engine, start):
    session = start(count=3)

    assert session.question_count == 3
    assert len(session.question_ids) == 3
    assert session.state == SessionState.IN_PROGRESS

    bank = asyncio.run(engine.get_questions("user-1", session.session_id))
    assert [q.ordinal for q in bank] == [0, 1, 2]
    assert all(q.answer is None for q in bank)
    assert all(q.category == "technical" for q in bank)


@pytest.mark.parametrize("count", [0, -1, 4, True])
def test_invalid_question_count_creates_nothing(engine, gateway, count):
    with pytest.raises(InputValidationError) as exc_info:
        asyncio.run(engine.start_session("user-1", JOB_TITLE, JOB_DESCRIPTION, count))

    assert exc_info.value.field == "question_count"
    assert gateway.question_calls == 0
    assert asyncio.run(engine.list_sessions("user-1")) == []


@pytest.mark.parametrize("title, description, field", [
    ("", JOB_DESCRIPTION, "job_title"),
    ("   ", JOB_DESCRIPTION, "job_title"),
    (JOB_TITLE, "", "job_description"),
])
def test_empty_job_fields_are_rejected(engine, title, description, field):
    with pytest.raises(InputValidationError) as exc_info:
        asyncio.run(engine.start_session("user-1", title, description, 3))
    assert exc_info.value.field == field


def test_generation_failure_creates_nothing(engine, gateway):
    gateway.fail_questions = True

    with pytest.raises(GenerationUnavailableError):
        asyncio.run(engine.start_session("user-1", JOB_TITLE, JOB_DESCRIPTION, 3))

    assert asyncio.run(engine.list_sessions("user-1")) == []


# ============================================================================
# LOOKUP
# ============================================================================

def test_sessions_are_private_to_their_owner(engine, start):
    session = start()

    with pytest.raises(NotFoundError):
        asyncio.run(engine.get_session("user-2", session.session_id))
    with pytest.raises(NotFoundError):
        asyncio.run(engine.resume_session("user-2", session.session_id))
    assert asyncio.run(engine.list_sessions("user-2")) == []


def test_list_sessions_most_recent_first(engine, start):
    first = start()
    second = start()
    answer(engine, second, 0)

    summaries = asyncio.run(engine.list_sessions("user-1"))

    assert [s.session_id for s in summaries] == [second.session_id, first.session_id]
    assert summaries[0].answered_questions == 1
    assert summaries[0].total_questions == 3
    assert summaries[1].answered_questions == 0
    assert not any(s.is_completed for s in summaries)


# ============================================================================
# RESUME
# ============================================================================

def test_fresh_session_resumes_at_first_question(engine, start):
    session = start()

    view = asyncio.run(engine.resume_session("user-1", session.session_id))

    assert view.state == SessionState.IN_PROGRESS
    assert view.position == 0
    assert view.current_question.id == session.question_ids[0]
    assert view.answered_questions == 0
    assert view.overall_feedback is None


def test_resume_finds_first_gap(engine, start):
    session = start(count=5)
    for ordinal in (0, 1, 3):
        answer(engine, session, ordinal)

    view = asyncio.run(engine.resume_session("user-1", session.session_id))

    assert view.position == 2
    assert view.current_question.id == session.question_ids[2]
    assert view.answered_questions == 3
    assert view.total_questions == 5


# ============================================================================
# COMPLETION
# ============================================================================

def test_overall_feedback_requires_every_answer(engine, gateway, start):
    session = start()
    answer(engine, session, 0)
    answer(engine, session, 1)

    with pytest.raises(SessionIncompleteError):
        asyncio.run(engine.overall_feedback("user-1", session.session_id))

    assert gateway.summary_calls == 0
    assert not asyncio.run(engine.get_session("user-1", session.session_id)).is_completed
    assert asyncio.run(engine.store.get_overall_feedback(session.session_id)) is None


def test_end_to_end_three_questions(engine, gateway, start):
    gateway.scores = [6, 8, 10]
    session = start(count=3)
    assert gateway.question_calls == 1

    for ordinal in range(3):
        feedback = answer(engine, session, ordinal)
        assert feedback.strengths

    overall = asyncio.run(engine.overall_feedback("user-1", session.session_id))

    assert overall.average_score == 8.0
    assert overall.readiness == ReadinessTier.READY
    assert overall.readiness in list(ReadinessTier)
    assert overall.summary == f"Answered 3 questions for {JOB_TITLE}."

    stored = asyncio.run(engine.get_session("user-1", session.session_id))
    assert stored.is_completed
    assert stored.completed_at is not None

    summary = asyncio.run(engine.list_sessions("user-1"))[0]
    assert summary.is_completed
    assert summary.answered_questions == 3


def test_overall_feedback_is_computed_once(engine, gateway, start):
    gateway.scores = [9, 9, 8]
    session = start()
    for ordinal in range(3):
        answer(engine, session, ordinal)

    first = asyncio.run(engine.overall_feedback("user-1", session.session_id))
    second = asyncio.run(engine.overall_feedback("user-1", session.session_id))

    assert first.average_score == 8.7
    assert first.readiness == ReadinessTier.HIGHLY_READY
    assert first.model_dump_json() == second.model_dump_json()
    assert gateway.summary_calls == 1


def test_concurrent_completion_summarizes_once(engine, gateway, start):
    session = start()
    for ordinal in range(3):
        answer(engine, session, ordinal)

    async def both():
        return await asyncio.gather(
            engine.resume_session("user-1", session.session_id),
            engine.overall_feedback("user-1", session.session_id),
        )

    view, overall = asyncio.run(both())

    assert view.state == SessionState.COMPLETED
    assert view.overall_feedback == overall
    assert gateway.summary_calls == 1


def test_resume_of_complete_session_returns_results(engine, gateway, start):
    session = start()
    for ordinal in range(3):
        answer(engine, session, ordinal)

    view = asyncio.run(engine.resume_session("user-1", session.session_id))

    assert view.state == SessionState.COMPLETED
    assert view.position is None
    assert view.current_question is None
    assert view.overall_feedback.average_score == 7.0
    assert gateway.summary_calls == 1


def test_failed_summary_leaves_session_open(engine, gateway, start):
    session = start()
    for ordinal in range(3):
        answer(engine, session, ordinal)

    gateway.fail_summary = True
    with pytest.raises(GenerationUnavailableError):
        asyncio.run(engine.overall_feedback("user-1", session.session_id))
    assert not asyncio.run(engine.get_session("user-1", session.session_id)).is_completed

    gateway.fail_summary = False
    overall = asyncio.run(engine.overall_feedback("user-1", session.session_id))
    assert overall.session_id == session.session_id
    assert asyncio.run(engine.get_session("user-1", session.session_id)).is_completed


def test_completion_is_logged_once_after_it_happens(engine, gateway, start, caplog):
    caplog.set_level(logging.INFO, logger="interview_coach.core.session_engine")
    session = start()
    for ordinal in range(3):
        answer(engine, session, ordinal)

    def completions():
        return [r for r in caplog.records if "→ completed" in r.getMessage()]

    gateway.fail_summary = True
    with pytest.raises(GenerationUnavailableError):
        asyncio.run(engine.overall_feedback("user-1", session.session_id))
    assert completions() == []

    gateway.fail_summary = False

    async def both():
        return await asyncio.gather(
            engine.resume_session("user-1", session.session_id),
            engine.overall_feedback("user-1", session.session_id),
        )

    asyncio.run(both())
    asyncio.run(engine.overall_feedback("user-1", session.session_id))

    assert len(completions()) == 1
    assert session.session_id in completions()[0].getMessage()
