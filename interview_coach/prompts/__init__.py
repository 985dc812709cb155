"""
AI prompt templates for InterviewCoach

Contains structured prompts for:
- Question generation
- Answer grading
- Session summary
"""

from interview_coach.prompts.interviewer import InterviewerPrompts
from interview_coach.prompts.evaluator import EvaluatorPrompts
from interview_coach.prompts.report import ReportPrompts

__all__ = [
    "InterviewerPrompts",
    "EvaluatorPrompts",
    "ReportPrompts",
]
