"""
AI Interviewer Prompt Templates

Contains the prompt for generating the full question set of a practice
session from a job title and description.
"""


class InterviewerPrompts:
    """
    Prompt templates for the AI interviewer.

    Key principles:
    - Questions grounded in the job description
    - A mix of behavioral, technical and situational questions
    - One clear question per item
    """

    SYSTEM_CONTEXT = """You are an experienced hiring manager preparing a mock interview.

Your role:
- Ask relevant, role-appropriate questions
- Ground every question in the job description provided
- Keep each question focused and clear
- Never include answers or hints

Guidelines:
- Mix behavioral, technical and situational questions
- Use "Tell me about a time..." and "How would you..." formats
- Avoid trivia or obscure tool-specific questions
"""

    def generate_questions_prompt(
        self,
        job_title: str,
        job_description: str,
        count: int,
    ) -> str:
        """Generate prompt for creating a session's questions."""

        prompt = f"""{self.SYSTEM_CONTEXT}

=== JOB TITLE ===
{job_title}

=== JOB DESCRIPTION ===
{job_description}

=== YOUR TASK ===
Write exactly {count} interview questions for this position, in the order they
should be asked.

IMPORTANT: Output ONLY valid JSON, no preamble text. Start directly with {{

{{
    "questions": [
        {{
            "text": "The question, as you would ask it",
            "category": "behavioral | technical | situational | <other short tag>"
        }}
    ]
}}
"""
        return prompt
