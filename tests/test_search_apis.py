import asyncio
from typing import Any, Dict, Optional

import pytest

from accountable.models.query import Citation
from accountable.services.search_apis import (
    NO_RESULTS_CONTEXT,
    SearchConfig,
    SearchResult,
    SerperSearchAPI,
    build_search_context,
    citations_from_results,
)
from accountable.utils.error_handling import SearchProviderError


class DummyResponse:
    def __init__(self, status: int = 200, payload: Optional[Dict[str, Any]] = None):
        self.status = status
        self._payload = payload if payload is not None else {"organic": []}

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def text(self):
        return "error body"

    async def json(self, content_type="application/json"):
        return self._payload


class DummySession:
    def __init__(self, response: Optional[DummyResponse] = None, error: Optional[BaseException] = None):
        self._response = response
        self._error = error
        self.last_json: Optional[Dict[str, Any]] = None
        self.last_headers: Optional[Dict[str, str]] = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    def post(self, url, json=None, headers=None):
        self.last_json = json
        self.last_headers = headers
        if self._error is not None:
            raise self._error
        return self._response


def _api(session: DummySession) -> SerperSearchAPI:
    api = SerperSearchAPI("serp-key")
    api._sess = lambda: session  # type: ignore[assignment]
    return api


@pytest.mark.asyncio
async def test_serper_request_and_result_mapping():
    payload = {
        "organic": [
            {"title": "Budget 2025", "link": "https://pib.gov.in/b", "snippet": "Highlights", "position": 1},
            {"title": "Rail projects", "link": "https://news.example/r", "position": 2},
            "junk",
        ]
    }
    dummy = DummySession(DummyResponse(payload=payload))

    results = await _api(dummy).search("union budget", SearchConfig(max_results=5))

    assert dummy.last_json == {"q": "union budget", "gl": "in", "hl": "en", "num": 5}
    assert dummy.last_headers["X-API-KEY"] == "serp-key"
    assert [r.title for r in results] == ["Budget 2025", "Rail projects"]
    assert results[1].snippet == ""
    assert results[0].position == 1


@pytest.mark.asyncio
async def test_serper_missing_organic_is_empty():
    dummy = DummySession(DummyResponse(payload={"searchParameters": {}}))

    assert await _api(dummy).search("q") == []


@pytest.mark.asyncio
async def test_serper_http_error():
    dummy = DummySession(DummyResponse(status=403))

    with pytest.raises(SearchProviderError) as excinfo:
        await _api(dummy).search("q")

    assert excinfo.value.status == 403


@pytest.mark.asyncio
async def test_serper_timeout_is_wrapped():
    dummy = DummySession(error=asyncio.TimeoutError())

    with pytest.raises(SearchProviderError):
        await _api(dummy).search("q")


def test_context_block_format():
    results = [
        SearchResult(title="A", link="https://a", snippet="sa"),
        SearchResult(title="B", link="https://b", snippet="sb"),
    ]

    assert build_search_context(results) == (
        "Title: A\nSnippet: sa\nLink: https://a\n\nTitle: B\nSnippet: sb\nLink: https://b"
    )


def test_empty_results_use_placeholder_context():
    assert build_search_context([]) == NO_RESULTS_CONTEXT
    assert citations_from_results([]) == []


def test_citations_keep_title_and_link():
    results = [SearchResult(title="A", link="https://a"), SearchResult(title="B", link="https://b")]

    assert citations_from_results(results) == [
        Citation(title="A", uri="https://a"),
        Citation(title="B", uri="https://b"),
    ]
