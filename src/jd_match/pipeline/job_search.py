"""Job Discovery & Ranking - searches postings and scores them against a resume."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from jd_match.clients.search_client import SearchClient
from jd_match.models.jobs import (
    PLACEHOLDER_URL,
    JobListing,
    JobSearchPreferences,
    JobSearchResult,
    MatchDetails,
    SearchHit,
)
from jd_match.pipeline.analyzer import AnalysisOrchestrator
from jd_match.pipeline.errors import InputError
from jd_match.pipeline.job_filters import is_job_board, is_job_posting

logger = logging.getLogger(__name__)

HIRING_TERMS = "hiring"
POSTING_TERMS = "apply position opening"
SNIPPET_CHARS = 500
MAX_SEARCH_RESULTS = 30

_MOCK_POSTINGS: tuple[tuple[str, str], ...] = (
    (
        "Senior Software Engineer - Backend",
        "We're looking for a Senior Software Engineer{where} with 5+ years of experience in Go, "
        "TypeScript, and distributed systems. Experience with Kubernetes, AWS, and microservices "
        "architecture required.",
    ),
    (
        "Full Stack Developer (TypeScript/React)",
        "Join our team as a Full Stack Developer{where}. You'll work with TypeScript, React, Node.js, "
        "and modern cloud technologies. Experience with Docker and CI/CD pipelines preferred.",
    ),
    (
        "DevOps Engineer - Cloud Infrastructure",
        "Seeking a DevOps Engineer{where} to manage our cloud infrastructure. Must have experience with "
        "AWS, Kubernetes, Docker, and CI/CD. Knowledge of monitoring and automation tools essential.",
    ),
    (
        "Backend Engineer - Go/TypeScript",
        "Backend Engineer position{where} requiring strong skills in Go and TypeScript. Experience with "
        "PostgreSQL, REST APIs, and microservices. Familiarity with Docker and Kubernetes is a plus.",
    ),
    (
        "Software Engineer - Distributed Systems",
        "We need a Software Engineer{where} with expertise in distributed systems, Go, and cloud "
        "technologies. Experience with message queues, databases, and container orchestration required.",
    ),
    (
        "Senior Backend Engineer - Microservices",
        "Senior Backend Engineer role{where} focusing on microservices architecture. Required: Go, "
        "TypeScript, Kubernetes, Docker, PostgreSQL. Experience with message brokers and event-driven "
        "systems preferred.",
    ),
    (
        "Full Stack Engineer - TypeScript/Node.js",
        "Full Stack Engineer position{where}. Build scalable web applications with TypeScript, Node.js, "
        "React. Experience with cloud platforms (AWS/GCP), Docker, and CI/CD required.",
    ),
    (
        "Backend Developer - Go & Cloud",
        "Backend Developer{where} specializing in Go and cloud infrastructure. Work with Kubernetes, "
        "Docker, PostgreSQL, and REST APIs. Strong understanding of distributed systems and microservices.",
    ),
)

# query keyword -> title keywords a mock posting must contain
_MOCK_ROLE_FILTERS: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...] = (
    (("backend", "go"), ("backend", "go")),
    (("full stack", "frontend"), ("full stack", "frontend")),
    (("devops",), ("devops",)),
)


def build_search_query(preferences: JobSearchPreferences) -> str:
    """Role plus keywords, biased toward postings with hiring-intent terms."""
    query = preferences.role.strip() or "software engineer"
    if preferences.keywords:
        query = f"{query} {preferences.keywords.strip()}"
    if preferences.location:
        return f"{query} {HIRING_TERMS} {preferences.location.strip()} {POSTING_TERMS}"
    return f"{query} {HIRING_TERMS} {POSTING_TERMS}"


def mock_job_results(query: str, limit: int, location: str | None = None) -> list[SearchHit]:
    """Fixed demo postings with placeholder URLs, loosely filtered by role keyword."""
    where = f" in {location}" if location else ""
    postings = [
        SearchHit(title=title, url=PLACEHOLDER_URL, snippet=snippet.format(where=where))
        for title, snippet in _MOCK_POSTINGS
    ]

    lowered = query.lower()
    selected = postings
    for query_keys, title_keys in _MOCK_ROLE_FILTERS:
        if any(k in lowered for k in query_keys):
            selected = [p for p in postings if any(k in p.title.lower() for k in title_keys)]
            break
    if not selected:
        selected = postings
    return selected[:limit]


def _job_url(url: str) -> str:
    url = (url or "").strip()
    if not url or url == "about:blank":
        return PLACEHOLDER_URL
    return url


def _company_from_title(title: str) -> str | None:
    parts = title.split(" - ")
    return parts[1].strip() if len(parts) > 1 else None


@dataclass
class _Candidates:
    hits: list[SearchHit]
    total_found: int


class JobDiscoveryPipeline:
    """query -> fetch -> denylist filter -> posting filter -> score top N -> rank."""

    def __init__(
        self,
        search: SearchClient | None,
        analyzer: AnalysisOrchestrator,
        *,
        max_results: int = 10,
        search_depth: str = "advanced",
        max_ranked_jobs: int = 3,
        scoring_concurrency: int = 1,
        fetch_threshold: int = 200,
        description_limit: int = 500,
    ):
        self.search = search
        self.analyzer = analyzer
        self.max_results = max_results
        self.search_depth = search_depth
        self.max_ranked_jobs = max_ranked_jobs
        self.scoring_concurrency = scoring_concurrency
        self.fetch_threshold = fetch_threshold
        self.description_limit = description_limit

    async def fetch_candidates(self, query: str, preferences: JobSearchPreferences) -> _Candidates:
        """Run the search and return posting-like hits in original order."""
        if self.search is None:
            logger.info("No TAVILY_API_KEY configured. Using mock job data for demo.")
            base_query = query.split(f" {HIRING_TERMS}")[0]
            hits = mock_job_results(base_query, self.max_results, preferences.location)
            return _Candidates(hits, len(hits))

        try:
            raw = await self.search.search(
                query,
                max_results=min(self.max_results * 3, MAX_SEARCH_RESULTS),
                search_depth=self.search_depth,
            )
        except Exception as exc:
            # Credential is set: failures mean "nothing found", never mock data
            logger.warning("Web search failed: %s", exc)
            return _Candidates([], 0)

        if not raw:
            logger.info("Search is configured but returned no results")
            return _Candidates([], 0)

        hits = [
            SearchHit(
                title=r.get("title") or "",
                url=r.get("url") or "",
                snippet=(r.get("content") or "")[:SNIPPET_CHARS],
                content=r.get("content") or "",
            )
            for r in raw
        ]
        direct = [h for h in hits if not is_job_board(h.url)]
        logger.info("Filtered out %d job board results", len(hits) - len(direct))

        postings = [h for h in direct if is_job_posting(h.url, h.title, h.content)]
        if postings:
            logger.info("Filtered to %d job postings", len(postings))
            selected = postings[: self.max_results]
        else:
            # Keep forward progress: return the top direct results unfiltered
            logger.warning("No results look like job postings; returning top results")
            selected = direct[: self.max_results]
        return _Candidates(selected, len(selected))

    async def _description_for(self, hit: SearchHit) -> str:
        description = hit.content or hit.snippet
        if (
            len(description) < self.fetch_threshold
            and self.search is not None
            and _job_url(hit.url) != PLACEHOLDER_URL
        ):
            logger.info("Content too short, fetching full page: %s", hit.url)
            try:
                full = await self.search.extract(hit.url)
            except Exception as exc:
                logger.warning("Could not fetch %s, scoring the snippet: %s", hit.url, exc)
                return description
            if len(full) > len(description):
                description = full
        return description

    async def score_candidate(self, hit: SearchHit, resume_text: str) -> JobListing:
        """Score one hit; failures keep the listing with score 0 and no details."""
        try:
            description = await self._description_for(hit)
            analysis = await self.analyzer.analyze(description, resume_text)
        except Exception as exc:
            logger.warning("Failed to analyze job %r: %s", hit.title, exc)
            return JobListing(
                title=hit.title,
                url=_job_url(hit.url),
                description=(hit.snippet or hit.content)[: self.description_limit],
                score=0,
            )
        logger.info("Scored %r: %d/100", hit.title, analysis.score)
        return JobListing(
            title=hit.title,
            company=_company_from_title(hit.title),
            url=_job_url(hit.url),
            description=description[: self.description_limit],
            score=analysis.score,
            match_details=MatchDetails(
                matched_skills=list(analysis.matched_skills),
                missing_skills=list(analysis.missing_skills),
            ),
        )

    async def _score_all(self, hits: list[SearchHit], resume_text: str) -> list[JobListing]:
        if self.scoring_concurrency <= 1:
            return [await self.score_candidate(hit, resume_text) for hit in hits]

        semaphore = asyncio.Semaphore(self.scoring_concurrency)

        async def _bounded(hit: SearchHit) -> JobListing:
            async with semaphore:
                return await self.score_candidate(hit, resume_text)

        # gather preserves input order regardless of completion order
        return list(await asyncio.gather(*(_bounded(hit) for hit in hits)))

    async def search_and_rank(
        self, resume_text: str, preferences: JobSearchPreferences | None = None
    ) -> JobSearchResult:
        """Find postings for the preferences and rank them by resume fit."""
        if not resume_text or not resume_text.strip():
            raise InputError("Resume text is required")
        preferences = preferences or JobSearchPreferences()
        query = build_search_query(preferences)
        logger.info("Searching for job postings: %r", query)

        candidates = await self.fetch_candidates(query, preferences)
        if not candidates.hits:
            return JobSearchResult(jobs=[], total_found=0, search_query=query)

        to_score = candidates.hits[: self.max_ranked_jobs]
        logger.info("Analyzing %d of %d candidates", len(to_score), candidates.total_found)
        jobs = await self._score_all(to_score, resume_text)

        # sorted() is stable: equal scores keep their original relative order
        ranked = sorted(jobs, key=lambda job: job.score or 0, reverse=True)
        return JobSearchResult(jobs=ranked, total_found=candidates.total_found, search_query=query)
