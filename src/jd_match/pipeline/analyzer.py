"""Analysis Orchestrator - runs a model task and chooses model output or fallback."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable

from pydantic import ValidationError

from jd_match.clients.llm_client import (
    ErrorEvent,
    LLMBackend,
    MessageEvent,
    TextEvent,
    create_backend,
)
from jd_match.config import LLMConfig, ModelProviderConfig
from jd_match.models.analysis import AnalysisResult, ResumeStrengthResult
from jd_match.models.cover_letter import CoverLetter
from jd_match.pipeline import cover_letter as letters
from jd_match.pipeline import resume_strength
from jd_match.pipeline.corrector import correct_skills
from jd_match.pipeline.errors import ErrorKind, InputError, TaskOutcome, classify_exception
from jd_match.pipeline.extractor import (
    JD_RESUME_SCHEMA,
    RESUME_STRENGTH_SCHEMA,
    OutputSchema,
    ResponseExtractor,
)
from jd_match.pipeline.fallback import (
    fallback_analysis,
    fallback_resume_strength,
    fallback_suggestions,
)

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 5

ANALYSIS_PROMPT = """\
Job Description:
{job_text}

Resume:
{resume_text}

Analyze and calculate fit score: (matched_skills / total_required_skills) * 100

CRITICAL RULES FOR SKILLS:
- Skills = ONLY specific technologies, tools, frameworks, programming languages, platforms (e.g., "Python", "React", "Docker", "AWS", "TypeScript", "PostgreSQL", "Kubernetes")
- EXCLUDE: benefits, salary info, company culture, job type (full-time/part-time), location, company size, startup status, "competitive salaries", "benefits package", "active startup positions", etc.
- EXCLUDE: generic soft skills like "testing", "communication", "problem-solving", "teamwork", "collaboration"
- EXCLUDE: job requirements that are not technical skills (e.g., "years of experience", "degree required", "remote work")
- For matched_skills: ONLY include skills that are EXPLICITLY mentioned in BOTH the JD AND the resume. Check carefully - if TypeScript appears in resume, it should be in matched_skills, NOT missing_skills.
- For missing_skills: ONLY include technical skills/tools from JD that are NOT found anywhere in the resume text. Double-check the resume content before marking as missing.
- Skills must be exact matches or clear variations (e.g., "TypeScript" matches "TypeScript", "TS" matches "TypeScript" if context is clear)

Output JSON only:
{{
  "score": <0-100 integer>,
  "matched_skills": [<specific technical skills/tools found in BOTH JD and resume - verify carefully>],
  "missing_skills": [<specific technical skills/tools from JD NOT found in resume - double-check resume before listing>],
  "suggestions": [<3-5 concise, actionable suggestions (one sentence each) on how to better position themselves as a candidate: what to emphasize, how to align experience, which projects to highlight - NOT formatting advice, NOT skill development advice>],
  "short_summary": "<brief explanation of match written in second person: 'You should...' or 'Your resume shows...' - use 'you' and 'your'>"
}}"""


def _require(text: str | None, what: str) -> None:
    if not text or not text.strip():
        raise InputError(f"{what} is required")


def build_analysis_prompt(job_text: str, resume_text: str) -> str:
    return ANALYSIS_PROMPT.format(job_text=job_text, resume_text=resume_text)


def build_analysis_result(payload: dict, job_text: str, resume_text: str) -> AnalysisResult:
    """Correct the skill lists of an extracted payload and build the result."""
    corrected = correct_skills(payload, job_text, resume_text)
    matched = corrected["matched_skills"]
    missing = corrected["missing_skills"]

    raw_suggestions = corrected.get("suggestions")
    if isinstance(raw_suggestions, str):
        raw_suggestions = [raw_suggestions]
    elif not isinstance(raw_suggestions, list):
        raw_suggestions = []
    suggestions = [
        s.strip() for s in raw_suggestions if isinstance(s, str) and s.strip()
    ][:MAX_SUGGESTIONS]
    if not suggestions:
        suggestions = fallback_suggestions(matched, missing)

    summary = corrected.get("short_summary")
    return AnalysisResult(
        score=corrected["score"],
        matched_skills=matched,
        missing_skills=missing,
        suggestions=suggestions,
        short_summary=summary.strip() if isinstance(summary, str) else "",
        source="model",
    )


class AnalysisOrchestrator:
    """Runs prompts against one LLM backend and falls back deterministically.

    ``run_task`` is the only place model failures are decided; the public
    operations (``analyze``, ``score_resume``, ``write_cover_letter``) turn an
    error outcome into their fallback result and never raise except for
    missing input.
    """

    def __init__(
        self,
        backend: LLMBackend | None,
        *,
        timeout: float = 30.0,
        cover_letter_min_length: int = letters.MIN_LETTER_LENGTH,
    ):
        self.backend = backend
        self.timeout = timeout
        self.cover_letter_min_length = cover_letter_min_length

    @classmethod
    def from_provider(
        cls,
        provider: ModelProviderConfig | None,
        llm: LLMConfig | None = None,
        **kwargs,
    ) -> AnalysisOrchestrator:
        llm = llm or LLMConfig()
        backend = None
        if provider is not None:
            logger.info("Using %s provider with model %s", provider.name, provider.model)
            backend = create_backend(
                provider,
                timeout=llm.timeout,
                max_iterations=llm.max_iterations,
                max_tokens=llm.max_tokens,
                temperature=llm.temperature,
            )
        else:
            logger.warning("No LLM credential configured; analyses will use the fallback path")
        return cls(backend, timeout=llm.timeout, **kwargs)

    async def _collect(self, prompt: str, system: str) -> TaskOutcome:
        parts: list[str] = []
        async for event in self.backend.stream(prompt, system=system):
            if isinstance(event, TextEvent):
                parts.append(event.content or "")
            elif isinstance(event, MessageEvent):
                parts.append(event.text)
            elif isinstance(event, ErrorEvent):
                kind = classify_exception(event.error)
                logger.warning("Model call failed (%s): %s", kind.value, event.error)
                return TaskOutcome.failure(kind, str(event.error), raw_text="".join(parts))
        text = "".join(parts)
        if not text.strip():
            logger.warning("Model returned an empty response")
            return TaskOutcome.failure(ErrorKind.EMPTY_OUTPUT)
        logger.info("Model completed with %d characters of response", len(text))
        return TaskOutcome.success(text, raw_text=text)

    async def complete(self, prompt: str, system: str = "") -> TaskOutcome:
        """Run a prompt and return the concatenated response text."""
        if self.backend is None:
            return TaskOutcome.failure(ErrorKind.NOT_CONFIGURED, "no LLM credential configured")
        try:
            return await asyncio.wait_for(self._collect(prompt, system), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Model call timed out after %.0fs", self.timeout)
            return TaskOutcome.failure(ErrorKind.TIMEOUT, f"no response within {self.timeout}s")

    async def run_task(self, task_text: str, schema: OutputSchema, system: str = "") -> TaskOutcome:
        """Run a prompt and extract a payload matching ``schema``."""
        outcome = await self.complete(task_text, system)
        if not outcome.ok:
            return outcome
        payload = ResponseExtractor(schema).extract(outcome.value)
        if payload is None:
            logger.warning("Unusable model output. Preview: %s", outcome.value[:500])
            return TaskOutcome.failure(
                ErrorKind.MALFORMED_OUTPUT, f"response does not match {schema.name}", outcome.raw_text
            )
        return TaskOutcome.success(payload, raw_text=outcome.raw_text)

    async def _guarded(self, step: Awaitable[TaskOutcome]) -> TaskOutcome:
        try:
            return await step
        except ValidationError as exc:
            logger.warning("Model payload failed validation: %s", exc)
            return TaskOutcome.failure(ErrorKind.MALFORMED_OUTPUT, str(exc))
        except Exception as exc:
            logger.exception("Unexpected error in analysis pipeline")
            return TaskOutcome.failure(ErrorKind.INTERNAL, str(exc))

    async def _analyze_with_model(self, job_text: str, resume_text: str) -> TaskOutcome:
        outcome = await self.run_task(build_analysis_prompt(job_text, resume_text), JD_RESUME_SCHEMA)
        if not outcome.ok:
            return outcome
        result = build_analysis_result(outcome.value, job_text, resume_text)
        logger.info(
            "Model analysis: score=%d, %d matched, %d missing",
            result.score,
            len(result.matched_skills),
            len(result.missing_skills),
        )
        return TaskOutcome.success(result, raw_text=outcome.raw_text)

    async def analyze(self, job_text: str, resume_text: str) -> AnalysisResult:
        """Score how well a resume fits a job description."""
        _require(resume_text, "Resume text")
        _require(job_text, "Job description")
        outcome = await self._guarded(self._analyze_with_model(job_text, resume_text))
        if outcome.ok:
            return outcome.value
        logger.info("Using fallback analysis (%s)", outcome.error)
        return fallback_analysis(job_text, resume_text)

    async def _strength_with_model(self, resume_text: str, job_text: str | None) -> TaskOutcome:
        outcome = await self.run_task(
            resume_strength.build_strength_prompt(resume_text, job_text),
            RESUME_STRENGTH_SCHEMA,
            system=resume_strength.SYSTEM_PROMPT,
        )
        if not outcome.ok:
            return outcome
        return TaskOutcome.success(resume_strength.build_strength_result(outcome.value))

    async def score_resume(self, resume_text: str, job_text: str | None = None) -> ResumeStrengthResult:
        """Score resume quality, optionally against a target job description."""
        _require(resume_text, "Resume text")
        outcome = await self._guarded(self._strength_with_model(resume_text, job_text))
        if outcome.ok:
            return outcome.value
        logger.info("Using fallback resume scoring (%s)", outcome.error)
        return fallback_resume_strength(resume_text)

    async def _letter_with_model(
        self, job_text: str, resume_text: str, company: str | None
    ) -> TaskOutcome:
        outcome = await self.complete(
            letters.build_cover_letter_prompt(job_text, resume_text, company),
            system=letters.SYSTEM_PROMPT,
        )
        if not outcome.ok:
            return outcome
        body = letters.clean_cover_letter(outcome.value, self.cover_letter_min_length)
        if body == letters.FALLBACK_LETTER:
            return TaskOutcome.failure(ErrorKind.MALFORMED_OUTPUT, "cover letter too short after cleanup")
        return TaskOutcome.success(CoverLetter(body=body, source="model"))

    async def write_cover_letter(
        self, job_text: str, resume_text: str, company: str | None = None
    ) -> CoverLetter:
        """Draft a cover letter body (no salutation or signature)."""
        _require(resume_text, "Resume text")
        _require(job_text, "Job description")
        outcome = await self._guarded(self._letter_with_model(job_text, resume_text, company))
        if outcome.ok:
            return outcome.value
        logger.info("Using fallback cover letter (%s)", outcome.error)
        return CoverLetter(body=letters.FALLBACK_LETTER, source="fallback")
