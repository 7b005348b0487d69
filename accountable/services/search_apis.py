"""
Search-API integration for the fallback path (Serper Google-search API).

The grounded-query fallback needs a small ranked list of organic results
(title / snippet / link) for a raw prompt; this module fetches them and turns
them into the two things the fallback consumes: a plain-text context block
and a citation list.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import aiohttp
import structlog

from ..core.config import (
    SEARCH_API_TIMEOUT_SEC,
    SEARCH_COUNTRY,
    SEARCH_LANGUAGE,
    SEARCH_MAX_RESULTS,
    SERPER_API_URL,
)
from ..models.query import Citation
from ..utils.error_handling import SearchProviderError
from ..utils.otel import otel_span, set_span_attrs

logger = structlog.get_logger(__name__)

PROVIDER = "serper"

# Context block used when the search returns no organic results
NO_RESULTS_CONTEXT = "No recent news found."


# --------------------------------------------------------------------------- #
#                          DATA MODELS                                        #
# --------------------------------------------------------------------------- #

@dataclass
class SearchResult:
    title: str
    link: str
    snippet: str = ""
    position: Optional[int] = None
    raw_data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SearchConfig:
    country: str = SEARCH_COUNTRY
    language: str = SEARCH_LANGUAGE
    max_results: int = SEARCH_MAX_RESULTS


# --------------------------------------------------------------------------- #
#                       BASE SEARCH API                                       #
# --------------------------------------------------------------------------- #


class BaseSearchAPI:
    def __init__(self, api_key: str = "", timeout_seconds: float = SEARCH_API_TIMEOUT_SEC):
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

    def _sess(self) -> aiohttp.ClientSession:
        # One session per search call; nothing is shared between queries
        return aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout_seconds))

    async def search(self, query: str, cfg: SearchConfig) -> List[SearchResult]:
        raise NotImplementedError


class SerperSearchAPI(BaseSearchAPI):
    """
    Serper.dev Google search.
    Requires SERP_API_KEY (passed explicitly).
    """

    def __init__(
        self,
        api_key: str,
        *,
        url: str = SERPER_API_URL,
        timeout_seconds: float = SEARCH_API_TIMEOUT_SEC,
    ):
        super().__init__(api_key, timeout_seconds)
        self.url = url

    async def search(self, query: str, cfg: Optional[SearchConfig] = None) -> List[SearchResult]:
        """Return organic results in rank order.

        Raises:
            SearchProviderError: on transport failure or a non-2xx status.
        """
        cfg = cfg or SearchConfig()
        start = time.perf_counter()
        attrs = {"provider": PROVIDER, "success": False}

        body = {
            "q": query,
            "gl": cfg.country,
            "hl": cfg.language,
            "num": max(1, int(cfg.max_results)),
        }
        headers = {"X-API-KEY": self.api_key, "Content-Type": "application/json"}

        with otel_span("search.provider.search", attrs) as sp:
            try:
                async with self._sess() as session:
                    async with session.post(self.url, json=body, headers=headers) as r:
                        if r.status < 200 or r.status >= 300:
                            detail = await r.text()
                            raise SearchProviderError(
                                f"Serper returned HTTP {r.status}: {detail[:300]}",
                                provider=PROVIDER,
                                status=r.status,
                            )
                        try:
                            data = await r.json(content_type=None)
                        except ValueError as exc:
                            raise SearchProviderError(
                                f"Serper returned a non-JSON body: {exc}", provider=PROVIDER
                            ) from exc
            except SearchProviderError:
                raise
            except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
                raise SearchProviderError(f"Serper request failed: {exc}", provider=PROVIDER) from exc

            set_span_attrs(
                sp,
                http_status=200,
                success=True,
                latency_ms=int((time.perf_counter() - start) * 1000),
            )

        organic = data.get("organic") if isinstance(data, dict) else None
        results: List[SearchResult] = []
        for item in organic or []:
            if not isinstance(item, dict):
                continue
            results.append(
                SearchResult(
                    title=item.get("title") or "",
                    link=item.get("link") or "",
                    snippet=item.get("snippet") or "",
                    position=item.get("position"),
                    raw_data=item,
                )
            )
        logger.info("Serper search completed", query=query[:80], results=len(results))
        return results


# --------------------------------------------------------------------------- #
#                       RESULT ADAPTERS                                       #
# --------------------------------------------------------------------------- #

def build_search_context(results: Sequence[SearchResult]) -> str:
    """Flatten results into the context block handed to the fallback LLM."""
    if not results:
        return NO_RESULTS_CONTEXT
    return "\n\n".join(
        f"Title: {r.title}\nSnippet: {r.snippet}\nLink: {r.link}" for r in results
    )


def citations_from_results(results: Sequence[SearchResult]) -> List[Citation]:
    """One citation per organic result, title and link verbatim."""
    return [Citation(title=r.title, uri=r.link) for r in results]
