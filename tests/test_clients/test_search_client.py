"""Tests for SearchClient (Tavily search wrapper)."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from jd_match.clients.search_client import MAX_EXTRACT_CHARS, SearchClient, build_search_client


class TestSearchClientInit:
    def test_missing_api_key_raises_value_error(self, monkeypatch):
        """Raises ValueError when no api_key arg and TAVILY_API_KEY env var is absent."""
        monkeypatch.delenv("TAVILY_API_KEY", raising=False)
        with patch("jd_match.clients.search_client.AsyncTavilyClient"):
            with pytest.raises(ValueError, match="Tavily API key required"):
                SearchClient()

    def test_init_with_env_var_succeeds(self, monkeypatch):
        monkeypatch.setenv("TAVILY_API_KEY", "env-key")
        with patch("jd_match.clients.search_client.AsyncTavilyClient") as mock_cls:
            SearchClient()
            mock_cls.assert_called_once_with(api_key="env-key")


class TestBuildSearchClient:
    def test_none_without_key(self):
        assert build_search_client({}) is None

    def test_blank_key(self):
        assert build_search_client({"TAVILY_API_KEY": " "}) is None

    def test_client_with_key(self):
        with patch("jd_match.clients.search_client.AsyncTavilyClient"):
            assert isinstance(build_search_client({"TAVILY_API_KEY": "k"}), SearchClient)


class TestSearchClientSearch:
    async def test_search_returns_formatted_results(self):
        mock_tavily = AsyncMock()
        mock_tavily.search = AsyncMock(return_value={
            "results": [
                {"title": "Result Title", "url": "https://example.com", "content": "Some content"},
                {"title": "Raw only", "url": "https://example.org", "content": "", "raw_content": "Raw"},
            ]
        })
        with patch("jd_match.clients.search_client.AsyncTavilyClient", return_value=mock_tavily):
            client = SearchClient(api_key="test-key")
            results = await client.search("python hiring", max_results=30, search_depth="basic")

        assert results[0] == {
            "title": "Result Title",
            "url": "https://example.com",
            "content": "Some content",
        }
        assert results[1]["content"] == "Raw"
        mock_tavily.search.assert_awaited_once_with(
            query="python hiring",
            max_results=30,
            search_depth="basic",
            include_raw_content=True,
        )

    async def test_search_error_propagates(self):
        mock_tavily = AsyncMock()
        mock_tavily.search = AsyncMock(side_effect=RuntimeError("boom"))
        with patch("jd_match.clients.search_client.AsyncTavilyClient", return_value=mock_tavily):
            client = SearchClient(api_key="test-key")
            with pytest.raises(RuntimeError):
                await client.search("q")


class TestSearchClientExtract:
    async def test_extract_collapses_whitespace_and_truncates(self):
        mock_tavily = AsyncMock()
        mock_tavily.extract = AsyncMock(return_value={
            "results": [{"url": "https://x", "raw_content": "Senior   Engineer\n\n" + "a " * 5000}]
        })
        with patch("jd_match.clients.search_client.AsyncTavilyClient", return_value=mock_tavily):
            client = SearchClient(api_key="test-key")
            text = await client.extract("https://x")

        assert text.startswith("Senior Engineer a a")
        assert len(text) == MAX_EXTRACT_CHARS
        mock_tavily.extract.assert_awaited_once_with(urls=["https://x"])

    async def test_extract_no_results(self):
        mock_tavily = AsyncMock()
        mock_tavily.extract = AsyncMock(return_value={"results": []})
        with patch("jd_match.clients.search_client.AsyncTavilyClient", return_value=mock_tavily):
            client = SearchClient(api_key="test-key")
            assert await client.extract("https://x") == ""
