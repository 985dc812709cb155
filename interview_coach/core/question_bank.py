"""
Question Bank for InterviewCoach

Ordered, read-only view over one session's questions and their answers.
Progress and the resumption position are computed from this view alone.
"""

from typing import Iterator

from interview_coach.models.feedback import Feedback
from interview_coach.models.question import Question


class QuestionBank:
    """Immutable ordered collection of a session's questions."""

    def __init__(self, session_id: str, questions: list[Question]):
        self.session_id = session_id
        self._questions = tuple(sorted(questions, key=lambda q: q.ordinal))
        self._by_id = {q.id: q for q in self._questions}

    @classmethod
    async def load(cls, store, session_id: str) -> "QuestionBank":
        """Build a bank from persisted state."""
        return cls(session_id, await store.get_questions(session_id))

    def __iter__(self) -> Iterator[Question]:
        return iter(self._questions)

    def __len__(self) -> int:
        return len(self._questions)

    @property
    def questions(self) -> list[Question]:
        return list(self._questions)

    def get(self, question_id: str) -> Question | None:
        return self._by_id.get(question_id)

    def first_unanswered(self) -> Question | None:
        """First question in ordinal order without an answer."""
        for question in self._questions:
            if question.answer is None:
                return question
        return None

    @property
    def answered_count(self) -> int:
        return sum(1 for q in self._questions if q.answer is not None)

    @property
    def is_complete(self) -> bool:
        """True when every question has an answer (and so a feedback)."""
        return bool(self._questions) and self.first_unanswered() is None

    def feedback_set(self) -> list[Feedback]:
        """Feedback of the answered questions, in ordinal order."""
        return [q.answer.feedback for q in self._questions if q.answer is not None]
