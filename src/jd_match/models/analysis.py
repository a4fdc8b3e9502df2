"""Pydantic models for JD <-> resume analysis and resume strength output."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

Source = Literal["model", "fallback"]


def _unique_ci(values: list[str]) -> list[str]:
    """Trim, drop empties and keep the first spelling of case-insensitive duplicates."""
    seen: set[str] = set()
    result = []
    for value in values:
        value = value.strip()
        key = value.lower()
        if not value or key in seen:
            continue
        seen.add(key)
        result.append(value)
    return result


class AnalysisResult(BaseModel):
    score: int = Field(ge=0, le=100)
    matched_skills: list[str] = []
    missing_skills: list[str] = []
    suggestions: list[str] = Field(min_length=1, max_length=5)
    short_summary: str = ""
    source: Source = "model"

    model_config = {"frozen": True}

    @field_validator("matched_skills", "missing_skills")
    @classmethod
    def _dedupe(cls, v: list[str]) -> list[str]:
        return _unique_ci(v)

    @model_validator(mode="after")
    def _disjoint(self) -> AnalysisResult:
        overlap = {s.lower() for s in self.matched_skills} & {s.lower() for s in self.missing_skills}
        if overlap:
            raise ValueError(f"skills both matched and missing: {sorted(overlap)}")
        return self


class ResumeStrengthResult(BaseModel):
    overall_score: int = Field(ge=0, le=100)
    ats_score: int = Field(ge=0, le=100)
    skill_diversity_score: int = Field(ge=0, le=100)
    experience_depth_score: int = Field(ge=0, le=100)
    strengths: list[str] = Field(default=[], max_length=5)
    weaknesses: list[str] = Field(default=[], max_length=5)
    improvement_suggestions: list[str] = Field(default=[], max_length=5)
    summary: str = ""
    source: Source = "model"

    model_config = {"frozen": True}

    @property
    def composite_score(self) -> int:
        """Weighted blend: overall 40%, ATS 20%, diversity 20%, depth 20%."""
        return round(
            self.overall_score * 0.4
            + self.ats_score * 0.2
            + self.skill_diversity_score * 0.2
            + self.experience_depth_score * 0.2
        )
