"""Shared test fixtures."""

from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from jd_match.clients.llm_client import ErrorEvent, LLMBackend, MessageEvent, TextEvent
from jd_match.clients.search_client import SearchClient
from jd_match.pipeline.analyzer import AnalysisOrchestrator


class FakeBackend(LLMBackend):
    """Replays scripted event sequences, one script per call."""

    name = "fake"

    def __init__(self, *scripts, delay: float = 0.0):
        super().__init__("fake-model")
        self.scripts = list(scripts)
        self.delay = delay
        self.prompts: list[tuple[str, str]] = []

    async def stream(self, prompt: str, system: str = ""):
        self.prompts.append((prompt, system))
        script = self.scripts.pop(0) if len(self.scripts) > 1 else self.scripts[0]
        if self.delay:
            await asyncio.sleep(self.delay)
        for event in script:
            yield event


def text_reply(text: str, chunk: int = 16) -> list:
    """Split a reply into streamed TextEvents."""
    return [TextEvent(text[i : i + chunk]) for i in range(0, len(text), chunk)]


def message_reply(text: str) -> list:
    return [MessageEvent([{"type": "text", "text": text}])]


def error_reply(exc: BaseException) -> list:
    return [ErrorEvent(exc)]


class StatusError(Exception):
    """Stand-in for an SDK error carrying an HTTP status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


@pytest.fixture
def sample_jd_text() -> str:
    return """Senior Backend Engineer - Acme Cloud

Responsibilities:
- Build REST APIs in Python and Go
- Run services on Kubernetes and AWS

Requirements:
- 5+ years of experience with Python
- Docker, Kubernetes, PostgreSQL
- Competitive salaries and benefits package
"""


@pytest.fixture
def sample_resume_text() -> str:
    return """Jane Doe
jane@example.com | 555-123-4567

Summary
Backend engineer focused on reliable data services.

Experience
- Built Python REST services handling 2M requests per day
- Migrated 40 services to Docker containers
- Cut PostgreSQL query latency by 35%
- Mentored 3 junior engineers
- Owned the on-call rotation for payments

Education
BSc Computer Science, State University

Skills
Python, Docker, PostgreSQL, Git, Linux
"""


@pytest.fixture
def analysis_payload() -> dict:
    return {
        "score": 70,
        "matched_skills": ["Python", "Docker", "PostgreSQL"],
        "missing_skills": ["Kubernetes", "AWS"],
        "suggestions": ["Lead with your Python API work", "Mention container migrations"],
        "short_summary": "Your resume shows strong backend experience.",
    }


@pytest.fixture
def analysis_reply(analysis_payload) -> list:
    return text_reply(json.dumps(analysis_payload))


@pytest.fixture
def make_orchestrator():
    def _make(*scripts, **kwargs) -> AnalysisOrchestrator:
        return AnalysisOrchestrator(FakeBackend(*scripts), **kwargs)

    return _make


@pytest.fixture
def mock_search_client() -> SearchClient:
    """Mock SearchClient with canned results."""
    client = AsyncMock(spec=SearchClient)
    client.search = AsyncMock(return_value=[])
    client.extract = AsyncMock(return_value="")
    return client


@pytest.fixture
def make_backend():
    """Factory for a FakeBackend replaying the given scripts."""
    return FakeBackend


@pytest.fixture
def reply():
    """Builders for scripted backend replies: ``reply.text``, ``reply.message``, ``reply.error``."""
    return SimpleNamespace(text=text_reply, message=message_reply, error=error_reply)


@pytest.fixture
def status_error():
    """Factory for an SDK-like error carrying an HTTP status code."""
    return StatusError
