"""Model Response Extractor - turns raw model text into a validated payload."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from jd_match.utils.json_parser import extract_json

logger = logging.getLogger(__name__)

ERROR_FIELDS = ("error", "errors")


@dataclass(frozen=True)
class OutputSchema:
    """Minimum-field contract a model payload must satisfy."""

    name: str
    score_fields: tuple[str, ...] = ()
    list_fields: tuple[str, ...] = ()
    text_fields: tuple[str, ...] = ()


JD_RESUME_SCHEMA = OutputSchema(
    name="jd_resume_analysis",
    score_fields=("score",),
    list_fields=("matched_skills", "missing_skills"),
)

RESUME_STRENGTH_SCHEMA = OutputSchema(
    name="resume_strength",
    score_fields=("overall_score", "ats_score", "skill_diversity_score", "experience_depth_score"),
    list_fields=("strengths", "weaknesses", "improvement_suggestions"),
)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _carries_error(data: dict) -> bool:
    for key in ERROR_FIELDS:
        if data.get(key):
            return True
    reply = data.get("reply")
    return isinstance(reply, str) and "(error)" in reply


class ResponseExtractor:
    """Parse and shape-check model output against an OutputSchema."""

    def __init__(self, schema: OutputSchema):
        self.schema = schema

    def extract(self, text: str) -> dict | None:
        """Return the validated payload, or None if the text is unusable.

        Score fields are clamped to [0, 100] rather than rejected.
        """
        try:
            data = extract_json(text)
        except ValueError:
            logger.warning("No JSON object found in model response (%d chars)", len(text or ""))
            return None

        if _carries_error(data):
            logger.warning("Model response carries an error indicator: %s", str(data)[:200])
            return None

        for name in self.schema.score_fields:
            if not _is_number(data.get(name)):
                logger.warning("%s: field %r missing or not numeric", self.schema.name, name)
                return None
        for name in self.schema.list_fields:
            if not isinstance(data.get(name), list):
                logger.warning("%s: field %r missing or not a list", self.schema.name, name)
                return None
        for name in self.schema.text_fields:
            if not isinstance(data.get(name), str):
                logger.warning("%s: field %r missing or not a string", self.schema.name, name)
                return None

        for name in self.schema.score_fields:
            data[name] = min(100, max(0, round(data[name])))
        return data
