"""Tests for job discovery and ranking."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from jd_match.models.analysis import AnalysisResult
from jd_match.models.jobs import PLACEHOLDER_URL, JobSearchPreferences, SearchHit
from jd_match.pipeline.analyzer import AnalysisOrchestrator
from jd_match.pipeline.errors import InputError
from jd_match.pipeline.job_search import (
    JobDiscoveryPipeline,
    build_search_query,
    mock_job_results,
)

RESUME = "Python and Docker engineer"


def _result(score: int, matched=("python",), missing=()) -> AnalysisResult:
    return AnalysisResult(
        score=score,
        matched_skills=list(matched),
        missing_skills=list(missing),
        suggestions=["Lead with Python"],
    )


def _hit(title: str, url: str, content: str = "") -> dict:
    return {"title": title, "url": url, "content": content}


POSTING = "Join our team. Requirements: Python, Docker. " + "x" * 300


@pytest.fixture
def mock_analyzer() -> AnalysisOrchestrator:
    analyzer = AsyncMock(spec=AnalysisOrchestrator)
    analyzer.analyze = AsyncMock(return_value=_result(60))
    return analyzer


class TestBuildSearchQuery:
    def test_role_only(self):
        query = build_search_query(JobSearchPreferences(role="python developer"))
        assert query == "python developer hiring apply position opening"

    def test_keywords_and_location(self):
        query = build_search_query(
            JobSearchPreferences(role="backend engineer", location="Berlin", keywords="go kafka")
        )
        assert query == "backend engineer go kafka hiring Berlin apply position opening"

    def test_blank_role_defaults(self):
        assert build_search_query(JobSearchPreferences(role=" ")).startswith("software engineer hiring")


class TestMockJobResults:
    def test_backend_filter(self):
        hits = mock_job_results("backend engineer", 10)
        assert hits
        assert all("backend" in h.title.lower() or "go" in h.title.lower() for h in hits)

    def test_devops_filter(self):
        assert [h.title for h in mock_job_results("devops", 10)] == ["DevOps Engineer - Cloud Infrastructure"]

    def test_unfiltered_role_returns_all(self):
        assert len(mock_job_results("data scientist", 10)) == 8

    def test_location_in_snippet_and_placeholder_urls(self):
        hits = mock_job_results("data scientist", 10, location="Lisbon")
        assert all(h.url == PLACEHOLDER_URL for h in hits)
        assert "in Lisbon" in hits[0].snippet


class TestSearchAndRank:
    async def test_no_search_client_uses_mock_listings(self, mock_analyzer):
        pipeline = JobDiscoveryPipeline(None, mock_analyzer)
        result = await pipeline.search_and_rank(RESUME, JobSearchPreferences(role="devops"))

        assert result.total_found == 1
        assert len(result.jobs) == 1
        job = result.jobs[0]
        assert job.url == PLACEHOLDER_URL
        assert job.company == "Cloud Infrastructure"
        assert job.score == 60
        assert job.match_details.matched_skills == ["python"]

    async def test_mock_listings_ranked_top_three(self, mock_analyzer):
        mock_analyzer.analyze = AsyncMock(side_effect=[_result(10), _result(90), _result(40)])
        pipeline = JobDiscoveryPipeline(None, mock_analyzer)
        result = await pipeline.search_and_rank(RESUME)

        assert result.total_found == 8
        assert [j.score for j in result.jobs] == [90, 40, 10]
        assert mock_analyzer.analyze.await_count == 3

    async def test_search_failure_returns_empty(self, mock_analyzer, mock_search_client):
        mock_search_client.search = AsyncMock(side_effect=RuntimeError("tavily down"))
        pipeline = JobDiscoveryPipeline(mock_search_client, mock_analyzer)
        result = await pipeline.search_and_rank(RESUME)

        assert result.jobs == []
        assert result.total_found == 0
        assert "hiring" in result.search_query
        mock_analyzer.analyze.assert_not_called()

    async def test_empty_search_does_not_use_mocks(self, mock_analyzer, mock_search_client):
        pipeline = JobDiscoveryPipeline(mock_search_client, mock_analyzer)
        result = await pipeline.search_and_rank(RESUME)
        assert result.jobs == []

    async def test_job_boards_filtered_and_postings_kept(self, mock_analyzer, mock_search_client):
        mock_search_client.search = AsyncMock(return_value=[
            _hit("Python Jobs", "https://www.indeed.co.uk/jobs?q=python", POSTING),
            _hit("How to land a Python job", "https://acme.com/blog/python", POSTING),
            _hit("Backend Engineer - Acme", "https://careers.acme.com/jobs/1", POSTING),
            _hit("Data Engineer - Beta", "https://beta.io/careers/2", POSTING),
        ])
        pipeline = JobDiscoveryPipeline(mock_search_client, mock_analyzer, max_results=10)
        result = await pipeline.search_and_rank(RESUME)

        assert [j.title for j in result.jobs] == ["Backend Engineer - Acme", "Data Engineer - Beta"]
        assert result.total_found == 2
        assert result.jobs[0].company == "Acme"
        kwargs = mock_search_client.search.call_args.kwargs
        assert kwargs["max_results"] == 30
        assert kwargs["search_depth"] == "advanced"

    async def test_no_posting_like_results_keeps_top_results(self, mock_analyzer, mock_search_client):
        mock_search_client.search = AsyncMock(return_value=[
            _hit("Acme", "https://acme.com/about", "We build rockets. " + "y" * 300),
        ])
        result = await JobDiscoveryPipeline(mock_search_client, mock_analyzer).search_and_rank(RESUME)
        assert [j.title for j in result.jobs] == ["Acme"]

    async def test_stable_ranking_for_equal_scores(self, mock_analyzer, mock_search_client):
        mock_search_client.search = AsyncMock(return_value=[
            _hit(f"Engineer {i}", f"https://acme.com/careers/{i}", POSTING) for i in range(3)
        ])
        mock_analyzer.analyze = AsyncMock(side_effect=[_result(50), _result(80), _result(50)])
        result = await JobDiscoveryPipeline(mock_search_client, mock_analyzer).search_and_rank(RESUME)
        assert [j.title for j in result.jobs] == ["Engineer 1", "Engineer 0", "Engineer 2"]

    async def test_candidate_failure_scores_zero(self, mock_analyzer, mock_search_client):
        mock_search_client.search = AsyncMock(return_value=[
            _hit("Engineer A", "https://acme.com/careers/a", POSTING),
            _hit("Engineer B", "https://acme.com/careers/b", POSTING),
        ])
        mock_analyzer.analyze = AsyncMock(side_effect=[RuntimeError("boom"), _result(30)])
        result = await JobDiscoveryPipeline(mock_search_client, mock_analyzer).search_and_rank(RESUME)

        assert [j.title for j in result.jobs] == ["Engineer B", "Engineer A"]
        failed = result.jobs[1]
        assert failed.score == 0
        assert failed.match_details is None

    async def test_short_content_fetches_full_page(self, mock_analyzer, mock_search_client):
        mock_search_client.search = AsyncMock(return_value=[
            _hit("Engineer - Acme", "https://acme.com/careers/1", "Apply now"),
        ])
        mock_search_client.extract = AsyncMock(return_value="Full posting text. " * 20)
        result = await JobDiscoveryPipeline(mock_search_client, mock_analyzer).search_and_rank(RESUME)

        mock_search_client.extract.assert_awaited_once_with("https://acme.com/careers/1")
        job_text = mock_analyzer.analyze.call_args.args[0]
        assert job_text.startswith("Full posting text.")
        assert len(result.jobs[0].description) <= 500

    async def test_fetch_failure_scores_snippet(self, mock_analyzer, mock_search_client):
        mock_search_client.search = AsyncMock(return_value=[
            _hit("Engineer - Acme", "https://acme.com/careers/1", "Apply now"),
        ])
        mock_search_client.extract = AsyncMock(side_effect=RuntimeError("blocked"))
        result = await JobDiscoveryPipeline(mock_search_client, mock_analyzer).search_and_rank(RESUME)

        assert mock_analyzer.analyze.call_args.args[0] == "Apply now"
        assert result.jobs[0].score == 60

    async def test_blank_url_becomes_placeholder(self, mock_analyzer, mock_search_client):
        mock_search_client.search = AsyncMock(return_value=[
            _hit("Engineer - Acme", "about:blank", POSTING),
        ])
        result = await JobDiscoveryPipeline(mock_search_client, mock_analyzer).search_and_rank(RESUME)
        assert result.jobs[0].url == PLACEHOLDER_URL

    async def test_concurrent_scoring_is_bounded_and_ordered(self, mock_search_client):
        mock_search_client.search = AsyncMock(return_value=[
            _hit(f"Engineer {i}", f"https://acme.com/careers/{i}", POSTING) for i in range(3)
        ])
        active = 0
        peak = 0

        async def _analyze(job_text, resume_text):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return _result(70)

        analyzer = AsyncMock(spec=AnalysisOrchestrator)
        analyzer.analyze = AsyncMock(side_effect=_analyze)
        pipeline = JobDiscoveryPipeline(mock_search_client, analyzer, scoring_concurrency=2)
        result = await pipeline.search_and_rank(RESUME)

        assert peak == 2
        assert [j.title for j in result.jobs] == ["Engineer 0", "Engineer 1", "Engineer 2"]

    async def test_total_found_counts_selected_postings(self, mock_analyzer, mock_search_client):
        mock_search_client.search = AsyncMock(return_value=[
            _hit("Python Jobs", "https://www.dice.com/jobs/1", POSTING),
            _hit("Backend Engineer - Acme", "https://careers.acme.com/jobs/1", POSTING),
            _hit("Data Engineer - Beta", "https://beta.io/careers/2", POSTING),
        ])
        pipeline = JobDiscoveryPipeline(mock_search_client, mock_analyzer, max_results=1)
        result = await pipeline.search_and_rank(RESUME)

        assert result.total_found == 1
        assert [j.title for j in result.jobs] == ["Backend Engineer - Acme"]

    async def test_empty_resume_raises(self, mock_search_client):
        pipeline = JobDiscoveryPipeline(mock_search_client, AnalysisOrchestrator(None))
        with pytest.raises(InputError):
            await pipeline.search_and_rank("  ")


def test_search_hit_defaults():
    assert SearchHit(title="x").url == ""
