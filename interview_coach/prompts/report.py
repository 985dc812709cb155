"""
AI Summary Prompts

Contains the prompt for turning a session's per-question feedback into the
narrative part of the overall assessment.
"""

from interview_coach.models.feedback import Feedback


class ReportPrompts:
    """Prompt templates for the end-of-session summary."""

    SYSTEM_CONTEXT = """You are an expert career coach reviewing a candidate's mock interview.

Your role:
- Provide constructive, actionable feedback
- Be encouraging but honest
- Focus on growth and improvement
- Give specific, practical suggestions
"""

    def generate_summary_prompt(
        self,
        job_title: str,
        job_description: str,
        feedback: list[Feedback],
    ) -> str:
        """Generate prompt for the overall interview summary."""

        qa_summary = []
        for i, item in enumerate(feedback, 1):
            strengths = "; ".join(item.strengths) or "none noted"
            weaknesses = "; ".join(item.weaknesses) or "none noted"
            qa_summary.append(
                f"Q{i}: {item.score:g}/10\n"
                f"  Strengths: {strengths}\n"
                f"  Weaknesses: {weaknesses}"
            )
        qa_text = "\n".join(qa_summary)

        prompt = f"""{self.SYSTEM_CONTEXT}

=== POSITION ===
{job_title}

=== JOB DESCRIPTION ===
{job_description}

=== PER-QUESTION FEEDBACK ===
{qa_text}

=== YOUR TASK ===
Summarize this interview performance.

IMPORTANT: Output ONLY valid JSON, no preamble text. Start directly with {{

{{
    "overall_summary": "2-3 sentence assessment of the whole interview",
    "top_strengths": ["strength 1", "strength 2", "strength 3"],
    "top_improvements": ["area 1", "area 2", "area 3"],
    "recommendations": ["concrete next step 1", "concrete next step 2"]
}}
"""
        return prompt
