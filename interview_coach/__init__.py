"""
InterviewCoach - Interview practice session engine

Drives a user through generated interview questions, grades each answer once,
resumes interrupted sessions from persisted state and produces an overall
readiness assessment.
"""

__version__ = "0.1.0"
__author__ = "InterviewCoach Team"
