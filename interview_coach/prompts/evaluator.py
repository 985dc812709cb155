"""
AI Evaluator Prompt Templates

Contains the prompt for grading a single answer against its question and
the job it was asked for.
"""


class EvaluatorPrompts:
    """
    Prompt templates for AI evaluation of answers.

    Key principles:
    - One score on a 0-10 scale
    - Identify both strengths and gaps
    - Provide actionable suggestions
    """

    SYSTEM_CONTEXT = """You are an expert interviewer grading a candidate's written answer in a mock interview.

Your role:
- Score the answer objectively
- Identify what the candidate did well
- Note what was missing, vague or incorrect
- Suggest concrete ways to improve the answer

Be fair but thorough.
"""

    SCORING_GUIDE = """
=== SCORING GUIDE (0-10 scale) ===
- 9-10: Outstanding, specific, well-structured, clearly tied to the role
- 7-8: Strong answer with minor gaps
- 5-6: Adequate but generic or missing important detail
- 3-4: Weak, vague or partly off-topic
- 0-2: Missing, incorrect or unrelated
"""

    def generate_grading_prompt(
        self,
        job_title: str,
        job_description: str,
        question: str,
        answer: str,
    ) -> str:
        """Generate prompt for grading an answer."""

        prompt = f"""{self.SYSTEM_CONTEXT}

{self.SCORING_GUIDE}

=== POSITION ===
{job_title}

=== JOB DESCRIPTION ===
{job_description}

=== QUESTION ASKED ===
{question}

=== CANDIDATE'S ANSWER ===
"{answer}"

=== YOUR TASK ===
Grade the answer.

IMPORTANT: Output ONLY valid JSON, no preamble text. Start directly with {{

{{
    "score": <integer 0-10>,
    "strengths": ["specific strength 1", "specific strength 2"],
    "weaknesses": ["specific gap 1", "specific gap 2"],
    "suggestions": ["actionable improvement 1", "actionable improvement 2"]
}}
"""
        return prompt
