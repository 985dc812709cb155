import asyncio
import json

import httpx
import pytest

from interview_coach.core.errors import GenerationUnavailableError, MalformedResponseError
from interview_coach.core.generation_gateway import LLMGenerationGateway
from interview_coach.models.feedback import Feedback


def completion(content):
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


def make_gateway(settings, handler):
    client = httpx.AsyncClient(
        base_url=settings.llm_host,
        transport=httpx.MockTransport(handler),
    )
    return LLMGenerationGateway(settings, client=client)


class Script:
    """Replays canned responses and records the requests it saw."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        # Fresh copy so one canned response can be replayed
        return httpx.Response(
            response.status_code,
            content=response.content,
            headers=response.headers,
        )


QUESTIONS = {
    "questions": [
        {"text": "Tell me about a service you scaled.", "category": "Behavioral"},
        {"question": "How does a Postgres index work?", "type": "technical"},
        "Why Go for backend services?",
    ]
}

GRADE = {
    "score": 7.5,
    "strengths": ["Structured answer"],
    "weaknesses": ["No metrics"],
    "suggestions": ["Mention latency numbers"],
}


# ============================================================================
# QUESTIONS
# ============================================================================

def test_generate_questions_parses_mixed_entries(settings):
    script = Script(completion("Here you go:\n" + json.dumps(QUESTIONS) + "\nGood luck!"))
    gateway = make_gateway(settings, script)

    questions = asyncio.run(gateway.generate_questions("Backend Engineer", "Go and Postgres", 3))

    assert [q.category for q in questions] == ["behavioral", "technical", "general"]
    assert questions[1].text == "How does a Postgres index work?"

    request = script.requests[0]
    assert request.url.path == settings.llm_endpoint
    body = json.loads(request.content)
    assert body["messages"][0]["role"] == "user"
    assert "Backend Engineer" in body["messages"][0]["content"]


def test_extra_questions_are_truncated(settings):
    gateway = make_gateway(settings, Script(completion(json.dumps(QUESTIONS))))

    questions = asyncio.run(gateway.generate_questions("Backend Engineer", "Go", 2))

    assert len(questions) == 2


def test_too_few_questions_is_malformed(settings):
    short = json.dumps({"questions": ["Only one?"]})
    script = Script(*[completion(short)] * settings.generation_max_attempts)
    gateway = make_gateway(settings, script)

    with pytest.raises(MalformedResponseError):
        asyncio.run(gateway.generate_questions("Backend Engineer", "Go", 3))
    assert len(script.requests) == settings.generation_max_attempts


def test_blank_question_text_is_malformed(settings):
    blank = json.dumps({"questions": [{"text": "  "}]})
    script = Script(*[completion(blank)] * settings.generation_max_attempts)
    gateway = make_gateway(settings, script)

    with pytest.raises(MalformedResponseError):
        asyncio.run(gateway.generate_questions("Backend Engineer", "Go", 1))


# ============================================================================
# GRADING
# ============================================================================

def test_grade_answer(settings):
    gateway = make_gateway(settings, Script(completion(json.dumps(GRADE))))

    feedback = asyncio.run(gateway.grade_answer("Backend Engineer", "Go", "Q?", "A."))

    assert feedback == Feedback(**GRADE)


def test_server_errors_are_retried(settings):
    script = Script(
        httpx.Response(503, json={"error": "overloaded"}),
        httpx.ConnectError("connection refused"),
        completion(json.dumps(GRADE)),
    )
    gateway = make_gateway(settings, script)

    feedback = asyncio.run(gateway.grade_answer("Backend Engineer", "Go", "Q?", "A."))

    assert feedback.score == 7.5
    assert len(script.requests) == 3


def test_exhausted_retries_raise_unavailable(settings):
    script = Script(*[httpx.Response(500)] * settings.generation_max_attempts)
    gateway = make_gateway(settings, script)

    with pytest.raises(GenerationUnavailableError) as exc_info:
        asyncio.run(gateway.grade_answer("Backend Engineer", "Go", "Q?", "A."))

    assert not isinstance(exc_info.value, MalformedResponseError)
    assert len(script.requests) == settings.generation_max_attempts


@pytest.mark.parametrize("content", [
    "I think this answer deserves a seven.",
    json.dumps({"strengths": ["Good"]}),
    json.dumps({**GRADE, "score": 11}),
    json.dumps({**GRADE, "score": -1}),
    json.dumps({**GRADE, "score": "great"}),
])
def test_bad_grading_output_is_malformed(settings, content):
    script = Script(*[completion(content)] * settings.generation_max_attempts)
    gateway = make_gateway(settings, script)

    with pytest.raises(MalformedResponseError):
        asyncio.run(gateway.grade_answer("Backend Engineer", "Go", "Q?", "A."))


def test_malformed_output_recovers_on_retry(settings):
    script = Script(completion("no json here"), completion(json.dumps(GRADE)))
    gateway = make_gateway(settings, script)

    assert asyncio.run(gateway.grade_answer("Backend Engineer", "Go", "Q?", "A.")).score == 7.5


@pytest.mark.parametrize("body", [
    {"choices": []},
    {"choices": ["oops"]},
    {"choices": "oops"},
    {"choices": [{"message": None}]},
    {"choices": [{"message": "oops"}]},
    {"choices": [{"message": {"content": [{"text": 7}]}}]},
    ["not", "an", "object"],
])
def test_unusable_completion_is_malformed(settings, body):
    unusable = httpx.Response(200, json=body)
    script = Script(*[unusable] * settings.generation_max_attempts)
    gateway = make_gateway(settings, script)

    with pytest.raises(MalformedResponseError):
        asyncio.run(gateway.grade_answer("Backend Engineer", "Go", "Q?", "A."))
    assert len(script.requests) == settings.generation_max_attempts


def test_slow_service_times_out(settings):
    settings.generation_timeout_seconds = 0.05

    async def handler(request):
        await asyncio.sleep(1)
        return completion(json.dumps(GRADE))

    gateway = make_gateway(settings, handler)

    with pytest.raises(GenerationUnavailableError) as exc_info:
        asyncio.run(gateway.grade_answer("Backend Engineer", "Go", "Q?", "A."))
    assert "did not respond" in exc_info.value.message


# ============================================================================
# SUMMARY
# ============================================================================

def test_summarize(settings):
    content = json.dumps({
        "overall_summary": "  Solid backend fundamentals.  ",
        "top_strengths": ["APIs"],
        "top_improvements": ["Indexing"],
        "recommendations": ["Read about B-trees"],
    })
    gateway = make_gateway(settings, Script(completion(content)))

    draft = asyncio.run(gateway.summarize("Backend Engineer", "Go", [Feedback(score=7)]))

    assert draft.summary == "Solid backend fundamentals."
    assert draft.top_improvements == ["Indexing"]


def test_summary_without_text_is_malformed(settings):
    content = json.dumps({"overall_summary": "", "top_strengths": ["APIs"]})
    script = Script(*[completion(content)] * settings.generation_max_attempts)
    gateway = make_gateway(settings, script)

    with pytest.raises(MalformedResponseError):
        asyncio.run(gateway.summarize("Backend Engineer", "Go", [Feedback(score=7)]))
