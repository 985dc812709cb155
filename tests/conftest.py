"""Shared fixtures: a scripted generation gateway and temporary SQLite storage."""

import asyncio

import pytest

from interview_coach.config.settings import Settings
from interview_coach.core.errors import GenerationUnavailableError
from interview_coach.core.generation_gateway import GenerationGateway
from interview_coach.core.session_engine import SessionEngine
from interview_coach.core.session_store import SessionStore
from interview_coach.models.feedback import Feedback, SummaryDraft
from interview_coach.models.question import GeneratedQuestion

JOB_TITLE = "Backend Engineer"
JOB_DESCRIPTION = "Build and operate HTTP services. Requires Go and Postgres experience."


class FakeGateway(GenerationGateway):
    """Deterministic gateway that counts calls and can be told to fail."""

    def __init__(self):
        self.scores: list[float] = []
        self.default_score = 7.0
        self.fail_questions = False
        self.fail_grading = False
        self.fail_summary = False
        self.question_calls = 0
        self.grade_calls = 0
        self.summary_calls = 0

    async def generate_questions(self, job_title, job_description, count):
        self.question_calls += 1
        if self.fail_questions:
            raise GenerationUnavailableError("Generation service is down")
        return [
            GeneratedQuestion(text=f"Question {i + 1} for {job_title}?", category="technical")
            for i in range(count)
        ]

    async def grade_answer(self, job_title, job_description, question, answer_text):
        self.grade_calls += 1
        if self.fail_grading:
            raise GenerationUnavailableError("Generation service is down")
        score = self.scores.pop(0) if self.scores else self.default_score
        return Feedback(
            score=score,
            strengths=[f"Addressed: {question}"],
            weaknesses=["Few concrete numbers"],
            suggestions=["Quantify the impact"],
        )

    async def summarize(self, job_title, job_description, feedback):
        self.summary_calls += 1
        if self.fail_summary:
            raise GenerationUnavailableError("Generation service is down")
        return SummaryDraft(
            summary=f"Answered {len(feedback)} questions for {job_title}.",
            top_strengths=["Clear structure"],
            top_improvements=["More depth on databases"],
            recommendations=["Practice Postgres indexing questions"],
        )


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'interview_coach.db'}",
        llm_host="https://llm.example.com",
        llm_token="test-token",
        generation_timeout_seconds=5.0,
        generation_max_attempts=3,
        answer_revision_policy="reject",
        question_count_options="3,5,7,10",
        default_question_count=5,
    )


@pytest.fixture
def store(settings):
    store = SessionStore(settings.database_url)
    asyncio.run(store.create_all())
    yield store
    asyncio.run(store.close())


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def engine(store, gateway, settings):
    return SessionEngine(store=store, gateway=gateway, settings=settings)


@pytest.fixture
def start(engine):
    """Start a session for ``user-1`` and return it."""

    def _start(count=3, user_id="user-1"):
        return asyncio.run(engine.start_session(user_id, JOB_TITLE, JOB_DESCRIPTION, count))

    return _start


def drop_table(store, record):
    """Drop one table so the next write touching it fails inside the store."""

    async def _drop():
        async with store.engine.begin() as conn:
            await conn.run_sync(record.__table__.drop)

    asyncio.run(_drop())
