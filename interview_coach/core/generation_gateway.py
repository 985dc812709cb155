"""
Generation Gateway for InterviewCoach

The single seam between the session engine and the external generation
service. Handles all AI-powered operations:
- Question generation
- Answer grading
- Session summary

Retries, timeouts and response validation live here. A failure of any kind
surfaces as GenerationUnavailableError; the gateway never invents questions,
scores or feedback text.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, TypeVar

import httpx
from langfuse import Langfuse
from pydantic import ValidationError

from interview_coach.config.settings import Settings, get_settings
from interview_coach.core.errors import GenerationUnavailableError, MalformedResponseError
from interview_coach.models.feedback import Feedback, SummaryDraft
from interview_coach.models.question import GeneratedQuestion
from interview_coach.prompts.evaluator import EvaluatorPrompts
from interview_coach.prompts.interviewer import InterviewerPrompts
from interview_coach.prompts.report import ReportPrompts

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GenerationGateway(ABC):
    """
    Contract for the external generation capability.

    One interface for the three prompts, since they share the same
    dependency, failure mode and timeout policy.
    """

    @abstractmethod
    async def generate_questions(
        self,
        job_title: str,
        job_description: str,
        count: int,
    ) -> list[GeneratedQuestion]:
        """Return exactly ``count`` questions, in presentation order."""

    @abstractmethod
    async def grade_answer(
        self,
        job_title: str,
        job_description: str,
        question: str,
        answer_text: str,
    ) -> Feedback:
        """Grade one answer."""

    @abstractmethod
    async def summarize(
        self,
        job_title: str,
        job_description: str,
        feedback: list[Feedback],
    ) -> SummaryDraft:
        """Summarize a completed session's per-question feedback."""

    async def close(self) -> None:
        """Release any resources held by the gateway."""


class LLMGenerationGateway(GenerationGateway):
    """
    Generation gateway backed by a chat-completions serving endpoint.

    Observability:
    - Langfuse spans around each operation when keys are configured
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the gateway with serving endpoint configuration."""
        self.settings = settings or get_settings()

        # HTTP client for API calls
        self.client = client or httpx.AsyncClient(
            base_url=self.settings.llm_host.rstrip("/"),
            headers={
                "Authorization": f"Bearer {self.settings.llm_token}",
                "Content-Type": "application/json",
            },
            timeout=self.settings.generation_request_timeout_seconds,
        )

        # Prompt templates
        self.interviewer_prompts = InterviewerPrompts()
        self.evaluator_prompts = EvaluatorPrompts()
        self.report_prompts = ReportPrompts()

        # Initialize Langfuse for observability
        self.langfuse = None
        if self.settings.langfuse_enabled:
            if self.settings.langfuse_secret_key and self.settings.langfuse_public_key:
                self.langfuse = Langfuse(
                    secret_key=self.settings.langfuse_secret_key,
                    public_key=self.settings.langfuse_public_key,
                    host=self.settings.langfuse_base_url,
                )
                logger.info("Langfuse initialized for LLM observability")
            else:
                logger.info("Langfuse keys not configured, tracing disabled")

    async def close(self) -> None:
        """Close the HTTP client and flush Langfuse."""
        await self.client.aclose()
        if self.langfuse:
            try:
                self.langfuse.flush()
            except Exception as e:
                logger.warning(f"Failed to flush Langfuse: {e}")

    # =========================================================================
    # GENERATION OPERATIONS
    # =========================================================================

    async def generate_questions(
        self,
        job_title: str,
        job_description: str,
        count: int,
    ) -> list[GeneratedQuestion]:
        prompt = self.interviewer_prompts.generate_questions_prompt(job_title, job_description, count)

        questions = await self._generate(
            "question_generation",
            prompt,
            lambda response: self._parse_questions_response(response, count),
            max_tokens=2048,
            metadata={"job_title": job_title, "count": count},
        )
        logger.info(f"Generated {len(questions)} questions for '{job_title}'")
        return questions

    async def grade_answer(
        self,
        job_title: str,
        job_description: str,
        question: str,
        answer_text: str,
    ) -> Feedback:
        prompt = self.evaluator_prompts.generate_grading_prompt(
            job_title=job_title,
            job_description=job_description,
            question=question,
            answer=answer_text,
        )

        feedback = await self._generate(
            "answer_grading",
            prompt,
            self._parse_feedback_response,
            max_tokens=1024,
            metadata={"job_title": job_title, "answer_length": len(answer_text)},
        )
        logger.info(f"Grading complete: score={feedback.score:g}")
        return feedback

    async def summarize(
        self,
        job_title: str,
        job_description: str,
        feedback: list[Feedback],
    ) -> SummaryDraft:
        prompt = self.report_prompts.generate_summary_prompt(job_title, job_description, feedback)

        return await self._generate(
            "session_summary",
            prompt,
            self._parse_summary_response,
            max_tokens=1024,
            metadata={"job_title": job_title, "questions": len(feedback)},
        )

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    async def _generate(
        self,
        operation: str,
        prompt: str,
        parse: Callable[[str], T],
        max_tokens: int,
        metadata: dict[str, Any] | None = None,
    ) -> T:
        """Run one operation with bounded retries and an overall timeout."""
        span = self._start_span(operation, metadata)
        timeout = self.settings.generation_timeout_seconds

        try:
            result = await asyncio.wait_for(
                self._attempt(operation, prompt, parse, max_tokens),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"{operation} timed out after {timeout:g}s")
            self._end_span(span, {"error": "timeout"})
            raise GenerationUnavailableError(
                f"The generation service did not respond within {timeout:g} seconds"
            ) from e
        except GenerationUnavailableError as e:
            self._end_span(span, {"error": e.message})
            raise

        self._end_span(span, {"status": "ok"})
        return result

    async def _attempt(
        self,
        operation: str,
        prompt: str,
        parse: Callable[[str], T],
        max_tokens: int,
    ) -> T:
        max_attempts = self.settings.generation_max_attempts
        last_error: GenerationUnavailableError | None = None

        for attempt in range(max_attempts):
            try:
                response = await self._call_llm(prompt, max_tokens=max_tokens)
                return parse(response)
            except httpx.HTTPError as e:
                logger.warning(f"{operation} request failed (attempt {attempt + 1}/{max_attempts}): {e}")
                last_error = GenerationUnavailableError(f"Generation service error: {e}")
            except MalformedResponseError as e:
                logger.warning(f"{operation} returned malformed output (attempt {attempt + 1}/{max_attempts}): {e}")
                last_error = e

        logger.error(f"{operation} failed after {max_attempts} attempts")
        raise last_error

    async def _call_llm(self, prompt: str, max_tokens: int) -> str:
        """
        Call the serving endpoint.

        Args:
            prompt: The prompt to send
            max_tokens: Maximum tokens in response

        Returns:
            Model response text
        """
        payload = {
            "messages": [
                {"role": "user", "content": prompt}
            ],
            "max_tokens": max_tokens,
            "temperature": self.settings.llm_temperature,
        }

        response = await self.client.post(self.settings.llm_endpoint, json=payload)
        response.raise_for_status()

        try:
            result = response.json()
        except ValueError as e:
            raise MalformedResponseError("Generation service returned a non-JSON body") from e

        return self._extract_content(result)

    def _extract_content(self, result: Any) -> str:
        """Extract text content from API response, handling list/dict formats."""
        if not isinstance(result, dict):
            raise MalformedResponseError("Generation service returned an unexpected body")

        choices = result.get("choices") or [{}]
        if not isinstance(choices, list) or not isinstance(choices[0], dict):
            raise MalformedResponseError("Generation service returned malformed choices")

        message = choices[0].get("message") or {}
        if not isinstance(message, dict):
            raise MalformedResponseError("Generation service returned a malformed message")
        content = message.get("content", "")

        # Handle case where content is a list (multi-part response)
        if isinstance(content, list):
            text_parts = []
            for part in content:
                if isinstance(part, str):
                    text_parts.append(part)
                elif isinstance(part, dict) and isinstance(part.get("text"), str):
                    text_parts.append(part["text"])
            content = "".join(text_parts)

        if not isinstance(content, str) or not content.strip():
            raise MalformedResponseError("Generation service returned an empty completion")
        return content

    # =========================================================================
    # PARSING & VALIDATION
    # =========================================================================

    def _extract_json(self, response: str) -> dict[str, Any]:
        """Pull the JSON object out of a model response."""
        json_start = response.find("{")
        json_end = response.rfind("}") + 1
        if json_start < 0 or json_end <= json_start:
            raise MalformedResponseError("No JSON object in generation output")

        try:
            data = json.loads(response[json_start:json_end])
        except json.JSONDecodeError as e:
            raise MalformedResponseError(f"Invalid JSON in generation output: {e}") from e

        if not isinstance(data, dict):
            raise MalformedResponseError("Generation output is not a JSON object")
        return data

    def _parse_questions_response(self, response: str, count: int) -> list[GeneratedQuestion]:
        """Parse AI response into exactly ``count`` questions."""
        data = self._extract_json(response)
        items = data.get("questions")
        if not isinstance(items, list):
            raise MalformedResponseError("Generation output has no 'questions' list")

        questions = []
        try:
            for item in items:
                if isinstance(item, str):
                    questions.append(GeneratedQuestion(text=item))
                elif isinstance(item, dict):
                    questions.append(GeneratedQuestion(
                        text=item.get("text") or item.get("question") or "",
                        category=item.get("category") or item.get("type"),
                    ))
                else:
                    raise MalformedResponseError(f"Unexpected question entry: {item!r}")
        except ValidationError as e:
            raise MalformedResponseError(f"Invalid question in generation output: {e}") from e

        if len(questions) < count:
            raise MalformedResponseError(
                f"Expected {count} questions, generation service returned {len(questions)}"
            )
        if len(questions) > count:
            logger.info(f"Generation returned {len(questions)} questions, keeping the first {count}")

        return questions[:count]

    def _parse_feedback_response(self, response: str) -> Feedback:
        """Parse AI response into Feedback."""
        data = self._extract_json(response)
        if "score" not in data:
            raise MalformedResponseError("Grading output has no score")

        try:
            return Feedback(
                score=data["score"],
                strengths=data.get("strengths") or [],
                weaknesses=data.get("weaknesses") or [],
                suggestions=data.get("suggestions") or [],
            )
        except ValidationError as e:
            raise MalformedResponseError(f"Invalid grading output: {e}") from e

    def _parse_summary_response(self, response: str) -> SummaryDraft:
        """Parse AI response into the narrative part of the overall feedback."""
        data = self._extract_json(response)
        summary = data.get("overall_summary") or data.get("summary") or ""
        if not isinstance(summary, str) or not summary.strip():
            raise MalformedResponseError("Summary output has no summary text")

        try:
            return SummaryDraft(
                summary=summary.strip(),
                top_strengths=data.get("top_strengths") or [],
                top_improvements=data.get("top_improvements") or [],
                recommendations=data.get("recommendations") or [],
            )
        except ValidationError as e:
            raise MalformedResponseError(f"Invalid summary output: {e}") from e

    # =========================================================================
    # TRACING
    # =========================================================================

    def _start_span(self, name: str, metadata: dict[str, Any] | None):
        if not self.langfuse:
            return None
        try:
            return self.langfuse.start_span(name=name, metadata=metadata or {})
        except Exception as lf_err:
            logger.warning(f"Langfuse span start failed: {lf_err}")
            return None

    def _end_span(self, span, output: dict[str, Any]) -> None:
        if not span:
            return
        try:
            span.update(output=output)
            span.end()
        except Exception as lf_err:
            logger.warning(f"Langfuse span end failed: {lf_err}")
