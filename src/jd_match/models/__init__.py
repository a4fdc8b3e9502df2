"""Data models for the matching pipeline."""

from jd_match.models.analysis import AnalysisResult, ResumeStrengthResult
from jd_match.models.cover_letter import CoverLetter
from jd_match.models.jobs import (
    PLACEHOLDER_URL,
    JobListing,
    JobSearchPreferences,
    JobSearchResult,
    MatchDetails,
    SearchHit,
)

__all__ = [
    "AnalysisResult",
    "CoverLetter",
    "JobListing",
    "JobSearchPreferences",
    "JobSearchResult",
    "MatchDetails",
    "PLACEHOLDER_URL",
    "ResumeStrengthResult",
    "SearchHit",
]
