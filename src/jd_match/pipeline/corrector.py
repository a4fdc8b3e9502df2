"""Skill Consistency Corrector - reconciles model skill lists with the input texts."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

NON_TECHNICAL_TERMS: tuple[str, ...] = (
    "competitive salaries",
    "benefits",
    "benefits package",
    "salary",
    "compensation",
    "active startup positions",
    "startup",
    "full-time",
    "part-time",
    "remote",
    "years of experience",
    "experience",
    "degree",
    "bachelor",
    "master",
    "communication",
    "teamwork",
    "collaboration",
    "problem-solving",
    "testing",
    "company culture",
    "culture",
    "location",
    "relocation",
    "visa sponsorship",
)


def is_non_technical(skill: str) -> bool:
    lowered = skill.lower()
    return any(term in lowered for term in NON_TECHNICAL_TERMS)


def _clean_list(values: list) -> list[str]:
    cleaned = []
    for value in values:
        if not isinstance(value, str):
            continue
        value = value.strip()
        if value and not is_non_technical(value):
            cleaned.append(value)
    return cleaned


def correct_skills(parsed: dict, job_text: str, resume_text: str) -> dict:
    """Return a copy of ``parsed`` whose skill lists agree with the texts.

    - matched skills must appear in both texts
    - missing skills must appear in the job text; any that also appear in the
      resume are moved to matched
    - non-technical terms and empty entries are dropped

    The result is a fixed point: correcting it again changes nothing.
    """
    job_lower = job_text.lower()
    resume_lower = resume_text.lower()

    matched: list[str] = []
    seen: set[str] = set()
    for skill in _clean_list(parsed.get("matched_skills") or []):
        key = skill.lower()
        if key in seen:
            continue
        if key in job_lower and key in resume_lower:
            matched.append(skill)
            seen.add(key)

    missing: list[str] = []
    missing_seen: set[str] = set()
    for skill in _clean_list(parsed.get("missing_skills") or []):
        key = skill.lower()
        if key not in job_lower:
            logger.info("Dropping missing skill %r not present in the job text", skill)
            continue
        if key in resume_lower:
            if key not in seen:
                logger.warning("Model marked %r as missing but it is in the resume; moving to matched", skill)
                matched.append(skill)
                seen.add(key)
            continue
        if key not in missing_seen:
            missing.append(skill)
            missing_seen.add(key)

    corrected = dict(parsed)
    corrected["matched_skills"] = matched
    corrected["missing_skills"] = missing
    return corrected
