"""Resume strength prompt and payload shaping."""

from __future__ import annotations

from jd_match.models.analysis import ResumeStrengthResult

MAX_LIST_ITEMS = 5

SYSTEM_PROMPT = """\
You are an experienced technical recruiter who reviews resumes for software roles.
Judge only what is written in the resume. Respond with JSON only."""


def build_strength_prompt(resume_text: str, job_text: str | None = None) -> str:
    target = ""
    if job_text:
        target = f"""
Target job description (weigh relevance to this role):
{job_text}
"""
    return f"""Resume:
{resume_text}
{target}
Score the resume on four independent 0-100 scales:
- overall_score: overall quality and hiring readiness
- ats_score: how well an applicant tracking system can parse it (clear section headings, plain formatting, contact details, standard job titles)
- skill_diversity_score: breadth of distinct technologies, tools and domains
- experience_depth_score: concreteness of experience (bullet points per role, quantified results, scope and ownership)

Output JSON only:
{{
  "overall_score": <0-100 integer>,
  "ats_score": <0-100 integer>,
  "skill_diversity_score": <0-100 integer>,
  "experience_depth_score": <0-100 integer>,
  "strengths": [<up to 5 short strengths>],
  "weaknesses": [<up to 5 short weaknesses>],
  "improvement_suggestions": [<up to 5 concrete, one-sentence improvements>],
  "summary": "<two sentences written in second person>"
}}"""


def _strings(values: list) -> list[str]:
    return [v.strip() for v in values if isinstance(v, str) and v.strip()][:MAX_LIST_ITEMS]


def build_strength_result(payload: dict) -> ResumeStrengthResult:
    """Build a model-sourced result from an extracted payload."""
    summary = payload.get("summary")
    return ResumeStrengthResult(
        overall_score=payload["overall_score"],
        ats_score=payload["ats_score"],
        skill_diversity_score=payload["skill_diversity_score"],
        experience_depth_score=payload["experience_depth_score"],
        strengths=_strings(payload["strengths"]),
        weaknesses=_strings(payload["weaknesses"]),
        improvement_suggestions=_strings(payload["improvement_suggestions"]),
        summary=summary.strip() if isinstance(summary, str) else "",
        source="model",
    )
