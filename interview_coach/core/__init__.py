"""
Core business logic modules for InterviewCoach

Contains:
- Session Engine: State machine for the practice session lifecycle
- Question Bank: Ordered questions and resumption scan
- Answer Recorder: One graded answer per question
- Aggregator: Overall score, readiness and summary
- Generation Gateway: Questions, grading and summaries from the LLM service
- Session Store: Durable persistence
"""

from interview_coach.core.session_engine import SessionEngine
from interview_coach.core.question_bank import QuestionBank
from interview_coach.core.answer_recorder import AnswerRecorder
from interview_coach.core.aggregator import Aggregator
from interview_coach.core.generation_gateway import GenerationGateway, LLMGenerationGateway
from interview_coach.core.session_store import SessionStore

__all__ = [
    "SessionEngine",
    "QuestionBank",
    "AnswerRecorder",
    "Aggregator",
    "GenerationGateway",
    "LLMGenerationGateway",
    "SessionStore",
]
