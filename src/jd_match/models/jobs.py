"""Pydantic models for job discovery and ranking."""

from __future__ import annotations

from pydantic import BaseModel, Field

PLACEHOLDER_URL = "#"


class JobSearchPreferences(BaseModel):
    role: str = "software engineer"
    location: str | None = None
    keywords: str | None = None


class SearchHit(BaseModel):
    """One raw result from the web search backend."""

    title: str
    url: str = ""
    snippet: str = ""
    content: str = ""


class MatchDetails(BaseModel):
    matched_skills: list[str] = []
    missing_skills: list[str] = []


class JobListing(BaseModel):
    title: str
    company: str | None = None
    url: str = PLACEHOLDER_URL
    description: str = ""
    score: int | None = Field(default=None, ge=0, le=100)
    match_details: MatchDetails | None = None

    @property
    def is_placeholder(self) -> bool:
        return self.url == PLACEHOLDER_URL


class JobSearchResult(BaseModel):
    jobs: list[JobListing] = []
    total_found: int = Field(default=0, alias="totalFound")
    search_query: str = Field(default="", alias="searchQuery")

    model_config = {"populate_by_name": True}
