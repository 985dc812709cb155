"""Configuration for InterviewCoach."""

from interview_coach.config.settings import AnswerRevisionPolicy, Settings, get_settings

__all__ = ["AnswerRevisionPolicy", "Settings", "get_settings"]
