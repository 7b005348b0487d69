"""Shared fixtures: in-memory stand-ins for the three external backends.

The stubs record every call so tests can assert on what each backend saw,
and raise ``error`` when one is set.
"""

from __future__ import annotations

import json
import os
import sys
from typing import Any, Dict, List, Optional

import pytest

_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

from accountable.services.gemini_client import GeminiResponse, extract_text  # noqa: E402
from accountable.services.grounded_query import GroundedQueryExecutor  # noqa: E402
from accountable.services.search_apis import SearchResult  # noqa: E402


def gemini_payload(text: str = "", chunks: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    """A ``generateContent`` response body with one candidate."""
    candidate: Dict[str, Any] = {"content": {"role": "model", "parts": [{"text": text}]}}
    if chunks is not None:
        candidate["groundingMetadata"] = {"groundingChunks": chunks}
    return {"candidates": [candidate]}


class StubPrimary:
    def __init__(self) -> None:
        self.payload: Dict[str, Any] = gemini_payload("")
        self.error: Optional[BaseException] = None
        self.calls: List[Dict[str, Any]] = []

    def respond(self, text: str, chunks: Optional[List[Dict[str, Any]]] = None) -> None:
        self.payload = gemini_payload(text, chunks)

    def respond_json(self, value: Any, chunks: Optional[List[Dict[str, Any]]] = None) -> None:
        self.respond(json.dumps(value), chunks)

    async def generate(
        self, prompt, *, model, response_schema=None, tools=None, tool_config=None, system_instruction=None
    ):
        self.calls.append(
            {
                "prompt": prompt,
                "model": model,
                "response_schema": response_schema,
                "tools": tools,
                "tool_config": tool_config,
                "system_instruction": system_instruction,
            }
        )
        if self.error is not None:
            raise self.error
        return GeminiResponse(text=extract_text(self.payload), payload=self.payload)


class StubSearch:
    def __init__(self) -> None:
        self.results: List[SearchResult] = []
        self.error: Optional[BaseException] = None
        self.calls: List[Dict[str, Any]] = []

    async def search(self, query, cfg=None):
        self.calls.append({"query": query, "cfg": cfg})
        if self.error is not None:
            raise self.error
        return list(self.results)


class StubFallbackLLM:
    model = "deepseek-test"

    def __init__(self) -> None:
        self.text = ""
        self.error: Optional[BaseException] = None
        self.calls: List[Dict[str, Any]] = []

    async def complete(self, system_prompt, user_prompt, *, json_mode):
        self.calls.append(
            {"system_prompt": system_prompt, "user_prompt": user_prompt, "json_mode": json_mode}
        )
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def primary() -> StubPrimary:
    return StubPrimary()


@pytest.fixture
def search() -> StubSearch:
    return StubSearch()


@pytest.fixture
def fallback_llm() -> StubFallbackLLM:
    return StubFallbackLLM()


@pytest.fixture
def executor(primary, search, fallback_llm) -> GroundedQueryExecutor:
    return GroundedQueryExecutor(primary, search, fallback_llm, default_model="gemini-test")
