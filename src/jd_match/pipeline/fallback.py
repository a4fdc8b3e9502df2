"""Deterministic keyword-based analyzers used when the model path fails."""

from __future__ import annotations

import re

from jd_match.models.analysis import AnalysisResult, ResumeStrengthResult

SKILL_VOCABULARY: tuple[str, ...] = (
    "java", "python", "c++", "c", "go", "javascript", "typescript", "react", "node", "deno",
    "sql", "postgres", "mongodb", "rust", "docker", "kubernetes", "aws", "gcp", "azure",
    "ml", "machine learning", "nlp", "graphql", "rest", "git", "linux", "ci/cd",
)

GENERIC_SUGGESTION = (
    "Review the job description and ensure all key requirements are clearly highlighted in your resume"
)

# A term matches only when not glued to other word characters, so "c" does
# not match inside "docker" and "java" does not match inside "javascript".
_SKILL_PATTERNS = {
    term: re.compile(r"(?<![a-z0-9+#])" + re.escape(term) + r"(?![a-z0-9+#])")
    for term in SKILL_VOCABULARY
}


def extract_skills(text: str) -> list[str]:
    """Vocabulary terms present in ``text``, in vocabulary order."""
    lower = (text or "").lower()
    return [term for term in SKILL_VOCABULARY if _SKILL_PATTERNS[term].search(lower)]


def fallback_suggestions(matched: list[str], missing: list[str]) -> list[str]:
    suggestions = []
    if missing:
        suggestions.append(f"Add experience or projects demonstrating: {', '.join(missing[:3])}")
        if len(missing) > 3:
            suggestions.append(
                f"Consider highlighting transferable skills related to: {', '.join(missing[3:5])}"
            )
    if matched:
        suggestions.append(
            f"Emphasize your experience with: {', '.join(matched[:3])} in your resume summary"
        )
    if not suggestions:
        suggestions.append(GENERIC_SUGGESTION)
    return suggestions


def fallback_analysis(job_text: str, resume_text: str) -> AnalysisResult:
    """Keyword-set match of the job text against the resume. Pure function."""
    job_skills = extract_skills(job_text)
    resume_skills = set(extract_skills(resume_text))

    matched = [s for s in job_skills if s in resume_skills]
    missing = [s for s in job_skills if s not in resume_skills]
    score = round(100 * len(matched) / max(1, len(job_skills)))

    return AnalysisResult(
        score=score,
        matched_skills=matched,
        missing_skills=missing,
        suggestions=fallback_suggestions(matched, missing),
        short_summary=(
            f"Estimated fit: {score}/100. Matched {len(matched)} skills, missing {len(missing)} skills."
        ),
        source="fallback",
    )


_BULLET = re.compile(r"^\s*[\-\*•]\s", re.MULTILINE)
_QUANTITY = re.compile(r"\d+\s?[%$kKmM+]|\$\d|\d{2,}")
_EMAIL = re.compile(r"[\w.+-]+@[\w-]+\.[\w.]+")
_SECTION_MARKERS = {
    "experience": ("experience", "employment", "work history"),
    "education": ("education", "university", "degree"),
    "skills": ("skills", "technologies", "tech stack"),
    "projects": ("projects", "portfolio"),
    "summary": ("summary", "profile", "objective"),
}


def _clamp(value: float) -> int:
    return max(0, min(100, round(value)))


def fallback_resume_strength(resume_text: str) -> ResumeStrengthResult:
    """Heuristic resume quality scores from structure, evidence and vocabulary."""
    text = resume_text or ""
    lower = text.lower()
    words = text.split()
    bullets = len(_BULLET.findall(text))
    has_quant = bool(_QUANTITY.search(text))
    sections = [name for name, markers in _SECTION_MARKERS.items() if any(m in lower for m in markers)]
    skills = extract_skills(text)

    experience_depth = _clamp(min(bullets / 8, 1.0) * 70 + (30 if has_quant else 0))
    skill_diversity = _clamp(min(len(skills) / 10, 1.0) * 100)
    ats = _clamp(
        len(sections) / len(_SECTION_MARKERS) * 60
        + (20 if _EMAIL.search(text) else 0)
        + min(len(words) / 400, 1.0) * 20
    )
    overall = _clamp(
        min(len(words) / 300, 1.0) * 30
        + min(bullets / 8, 1.0) * 30
        + (20 if has_quant else 0)
        + len(sections) / len(_SECTION_MARKERS) * 20
    )

    strengths = []
    weaknesses = []
    improvements = []
    if has_quant:
        strengths.append("Includes quantified results")
    else:
        weaknesses.append("No quantified achievements")
        improvements.append("Add numbers to your achievements (percentages, users, revenue, time saved)")
    if bullets >= 5:
        strengths.append(f"{bullets} bullet points describe your experience")
    else:
        weaknesses.append("Experience is described in too few bullet points")
        improvements.append("Describe each role with at least three concrete bullet points")
    if skills:
        strengths.append(f"Lists recognizable technologies: {', '.join(skills[:5])}")
    else:
        weaknesses.append("No recognizable technical skills")
        improvements.append("Add a skills section naming the tools and languages you use")
    missing_sections = [name for name in _SECTION_MARKERS if name not in sections]
    if missing_sections:
        weaknesses.append(f"Missing sections: {', '.join(missing_sections)}")
        improvements.append(f"Add clearly labeled sections for: {', '.join(missing_sections)}")

    return ResumeStrengthResult(
        overall_score=overall,
        ats_score=ats,
        skill_diversity_score=skill_diversity,
        experience_depth_score=experience_depth,
        strengths=strengths[:5],
        weaknesses=weaknesses[:5],
        improvement_suggestions=improvements[:5],
        summary=f"Estimated resume strength: {overall}/100 across {len(words)} words and {bullets} bullet points.",
        source="fallback",
    )
