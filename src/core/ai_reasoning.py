"""
AI Reasoning Layer

Handles all calls to the external language-model gateway:
- Main question generation
- Answer judgment (the quality oracle)
- End-of-interview feedback synthesis

Every public method either returns a typed result or raises one of the
*Unavailable errors; fallbacks are applied by the callers.
Integrated with Langfuse for observability and tracing.
"""

import json
import logging
import re
from contextlib import contextmanager
from typing import Any

import httpx
from langfuse import Langfuse

from src.config.settings import Settings, get_settings
from src.core.errors import (
    OracleUnavailable,
    QuestionGenerationUnavailable,
    SynthesizerUnavailable,
)
from src.models.evaluation import (
    AnswerContext,
    AnswerJudgment,
    CompletenessTier,
    QualityTier,
)
from src.models.question import QuestionContext
from src.models.report import DETAILED_ANALYSIS_KEYS, FeedbackResult, InterviewTranscript
from src.prompts.evaluator import EvaluatorPrompts
from src.prompts.interviewer import InterviewerPrompts
from src.prompts.report import ReportPrompts

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")


def extract_json(response: str) -> dict[str, Any]:
    """
    Pull the JSON object out of a model response.

    Handles markdown code fences and leading/trailing prose.

    Raises:
        ValueError: If no JSON object can be decoded
    """
    text = _FENCE_RE.sub("", response.strip())
    json_start = text.find("{")
    json_end = text.rfind("}") + 1
    if json_start < 0 or json_end <= json_start:
        raise ValueError("No JSON object in response")
    data = json.loads(text[json_start:json_end])
    if not isinstance(data, dict):
        raise ValueError("Response JSON is not an object")
    return data


class AIReasoningLayer:
    """
    Client for the language-model gateway.

    Model Selection:
    - Reasoning endpoint: feedback synthesis (deep reasoning)
    - Fast endpoint: question generation and answer judgment (low latency)

    Observability:
    - Langfuse spans around every gateway call when enabled
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the reasoning layer.

        Args:
            settings: Application settings (defaults to the cached instance)
            client: Pre-built HTTP client, mainly for tests
        """
        self.settings = settings or get_settings()

        self.client = client or httpx.AsyncClient(
            base_url=self.settings.llm_gateway_host.rstrip("/"),
            headers={
                "Authorization": f"Bearer {self.settings.llm_gateway_token}",
                "Content-Type": "application/json",
            },
            timeout=self.settings.http_timeout_seconds,
        )

        self.interviewer_prompts = InterviewerPrompts()
        self.evaluator_prompts = EvaluatorPrompts()
        self.report_prompts = ReportPrompts()

        self.langfuse: Langfuse | None = None
        if self.settings.langfuse_enabled:
            if self.settings.langfuse_secret_key and self.settings.langfuse_public_key:
                try:
                    self.langfuse = Langfuse(
                        secret_key=self.settings.langfuse_secret_key,
                        public_key=self.settings.langfuse_public_key,
                        host=self.settings.langfuse_base_url,
                    )
                    logger.info("Langfuse initialized for LLM observability")
                except Exception as e:
                    logger.warning(f"Failed to initialize Langfuse: {e}")
            else:
                logger.info("Langfuse keys not configured, tracing disabled")

    async def close(self):
        """Close the HTTP client and flush Langfuse."""
        await self.client.aclose()
        if self.langfuse:
            try:
                self.langfuse.flush()
            except Exception as e:
                logger.warning(f"Failed to flush Langfuse: {e}")

    # =========================================================================
    # GATEWAY
    # =========================================================================

    @contextmanager
    def _trace(self, name: str, metadata: dict[str, Any]):
        """Wrap a gateway call in a Langfuse span; yields the span or None."""
        span = None
        if self.langfuse:
            try:
                span = self.langfuse.start_span(name=name, metadata=metadata)
            except Exception as e:
                logger.warning(f"Langfuse span start failed: {e}")
        try:
            yield span
        finally:
            if span:
                try:
                    span.end()
                except Exception as e:
                    logger.warning(f"Langfuse span end failed: {e}")

    def _extract_content(self, result: dict) -> str:
        """Extract text content from API response, handling list/dict formats."""
        content = result.get("choices", [{}])[0].get("message", {}).get("content", "")

        # Multi-part responses come back as a list
        if isinstance(content, list):
            text_parts = []
            for part in content:
                if isinstance(part, str):
                    text_parts.append(part)
                elif isinstance(part, dict) and "text" in part:
                    text_parts.append(part["text"])
            content = "".join(text_parts)

        return content if isinstance(content, str) else str(content)

    async def _call_model(
        self,
        endpoint: str,
        prompt: str,
        max_tokens: int,
        temperature: float,
        trace_name: str,
        session_id: str | None = None,
    ) -> str:
        """
        Send one chat-completion request to the gateway.

        Raises:
            httpx.HTTPError: On transport or HTTP status failure
        """
        payload = {
            "messages": [
                {"role": "user", "content": prompt}
            ],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

        with self._trace(trace_name, {"session_id": session_id, "endpoint": endpoint}) as span:
            response = await self.client.post(endpoint, json=payload)
            response.raise_for_status()
            text = self._extract_content(response.json())
            if span:
                try:
                    span.update(output=text[:500])
                except Exception as e:
                    logger.warning(f"Langfuse span update failed: {e}")
            return text

    # =========================================================================
    # QUESTION GENERATION
    # =========================================================================

    async def generate_question(self, context: QuestionContext) -> str:
        """
        Generate the next main question.

        Raises:
            QuestionGenerationUnavailable: If the gateway fails or the
                response is not a usable question
        """
        prompt = self.interviewer_prompts.generate_question_prompt(context)

        try:
            response = await self._call_model(
                self.settings.fast_endpoint,
                prompt,
                max_tokens=256,
                temperature=0.8,
                trace_name="question_generation_llm",
                session_id=context.session_id,
            )
        except httpx.HTTPError as e:
            logger.error(f"Question generation API error: {e}")
            raise QuestionGenerationUnavailable(str(e)) from e

        question = response.strip().strip('"').strip()
        if not question or question.startswith("{") or question.startswith("["):
            raise QuestionGenerationUnavailable("Model returned no usable question")

        logger.info(
            f"Generated question {context.question_number}/{context.total_questions} "
            f"for session {context.session_id} ({context.phase})"
        )
        return question

    # =========================================================================
    # ANSWER JUDGMENT
    # =========================================================================

    async def judge_answer(
        self,
        question: str,
        answer: str,
        context: AnswerContext,
    ) -> AnswerJudgment:
        """
        Judge an answer and propose follow-ups.

        Raises:
            OracleUnavailable: If the gateway fails or returns malformed JSON
        """
        prompt = self.evaluator_prompts.generate_judgment_prompt(question, answer, context)

        try:
            response = await self._call_model(
                self.settings.fast_endpoint,
                prompt,
                max_tokens=512,
                temperature=0.3,
                trace_name="answer_judgment_llm",
                session_id=context.session_id,
            )
        except httpx.HTTPError as e:
            logger.error(f"Answer judgment API error: {e}")
            raise OracleUnavailable(str(e)) from e

        try:
            judgment = self._parse_judgment(extract_json(response))
        except (ValueError, TypeError) as e:
            logger.warning(f"Failed to parse judgment JSON: {e}")
            raise OracleUnavailable(f"Malformed judgment: {e}") from e

        if self.langfuse:
            try:
                self.langfuse.create_score(
                    name="answer_quality",
                    value=judgment.quality_tier.value,
                    data_type="CATEGORICAL",
                    comment=f"Session: {context.session_id}, Q{context.question_index + 1}",
                )
            except Exception as lf_err:
                logger.warning(f"Langfuse score failed: {lf_err}")

        return judgment

    def _parse_judgment(self, data: dict[str, Any]) -> AnswerJudgment:
        """Map the model's JSON onto an AnswerJudgment."""
        quality = data.get("quality", data.get("quality_tier", 5))
        completeness = data.get("completeness", data.get("completeness_tier", 5))

        if isinstance(quality, (int, float)):
            quality_tier = QualityTier.from_score(float(quality))
        else:
            quality_tier = QualityTier(str(quality).lower())

        if isinstance(completeness, (int, float)):
            completeness_tier = CompletenessTier.from_score(float(completeness))
        else:
            completeness_tier = CompletenessTier(str(completeness).lower())

        followup = data.get("followUpNeeded", data.get("followup_warranted", False))
        candidates = data.get(
            "followUpQuestions",
            data.get("candidate_followups", data.get("suggestions", [])),
        )

        return AnswerJudgment(
            quality_tier=quality_tier,
            completeness_tier=completeness_tier,
            followup_warranted=bool(followup),
            reasoning=str(data.get("reasoning", data.get("feedback", ""))),
            candidate_followups=candidates,
        )

    # =========================================================================
    # FEEDBACK SYNTHESIS
    # =========================================================================

    async def summarize_interview(self, transcript: InterviewTranscript) -> FeedbackResult:
        """
        Produce the end-of-interview feedback.

        Raises:
            SynthesizerUnavailable: If the gateway fails or returns malformed JSON
        """
        prompt = self.report_prompts.generate_summary_prompt(transcript)

        try:
            response = await self._call_model(
                self.settings.reasoning_endpoint,
                prompt,
                max_tokens=2048,
                temperature=0.7,
                trace_name="feedback_summary_llm",
                session_id=transcript.session_id,
            )
        except httpx.HTTPError as e:
            logger.error(f"Feedback synthesis API error: {e}")
            raise SynthesizerUnavailable(str(e)) from e

        try:
            return self._parse_feedback(extract_json(response))
        except (ValueError, TypeError) as e:
            logger.warning(f"Failed to parse feedback JSON: {e}")
            raise SynthesizerUnavailable(f"Malformed feedback: {e}") from e

    def _parse_feedback(self, data: dict[str, Any]) -> FeedbackResult:
        """Map the model's JSON onto a FeedbackResult."""
        score = data.get("overallScore", data.get("overall_score"))
        if not isinstance(score, (int, float)):
            raise ValueError("overallScore missing")

        raw_analysis = data.get("detailedAnalysis", data.get("detailed_analysis", {})) or {}
        camel = {
            "technical_skills": "technicalSkills",
            "problem_solving": "problemSolving",
        }
        analysis = {
            key: str(raw_analysis.get(key, raw_analysis.get(camel.get(key, key), "")))
            for key in DETAILED_ANALYSIS_KEYS
        }

        return FeedbackResult(
            strengths=tuple(data.get("strengths", [])),
            weaknesses=tuple(data.get("weaknesses", [])),
            suggestions=tuple(data.get("suggestions", data.get("recommendations", []))),
            overall_score=round(max(0, min(100, score))),
            summary=str(data.get("summary", "")),
            detailed_analysis=analysis,
        )
