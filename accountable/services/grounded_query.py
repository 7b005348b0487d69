"""
Grounded-query executor
-----------------------
Runs one prompt against the primary backend (Gemini), optionally with
schema-constrained JSON output and web-search grounding, and falls back to
Serper search + DeepSeek when a *grounded* primary call fails.

Per call::

    Attempting-Primary ──ok──────────────────────────────► Success
            │ error
            ├─ not grounded ─────────────────────────────► Failed (re-raised)
            └─ grounded ─► Attempting-Fallback ──ok──────► Success
                                    └──── error ─────────► Failed

Non-grounded primary failures are deliberately *not* masked by the fallback.
Both paths converge on :class:`QueryResult`; when a schema was requested the
raw text is parsed as JSON and a parse failure is reported on the result, not
raised.
"""

from __future__ import annotations

from typing import List, Optional

import structlog

from ..core.config import GEMINI_MODEL, ProviderCredentials
from ..models.query import Citation, Engine, QueryRequest, QueryResult
from ..models.schema import SchemaNode
from ..utils.error_handling import log_exception
from ..utils.json_payload import parse_json_payload
from ..utils.otel import otel_span, set_span_attrs
from .fallback_llm import DeepSeekClient, build_system_prompt, build_user_prompt
from .gemini_client import GeminiClient, extract_grounding_citations, web_search_tool
from .search_apis import (
    SearchConfig,
    SerperSearchAPI,
    build_search_context,
    citations_from_results,
)

logger = structlog.get_logger(__name__)


class GroundedQueryExecutor:
    """Primary/fallback query execution with one normalised result shape.

    The executor keeps no per-call state; concurrent ``execute`` calls are
    independent.
    """

    def __init__(
        self,
        primary: GeminiClient,
        search: SerperSearchAPI,
        fallback_llm: DeepSeekClient,
        *,
        default_model: str = GEMINI_MODEL,
        search_config: Optional[SearchConfig] = None,
    ) -> None:
        self.primary = primary
        self.search = search
        self.fallback_llm = fallback_llm
        self.default_model = default_model
        self.search_config = search_config or SearchConfig()

    @classmethod
    def from_credentials(
        cls,
        credentials: ProviderCredentials,
        *,
        default_model: str = GEMINI_MODEL,
    ) -> "GroundedQueryExecutor":
        return cls(
            primary=GeminiClient(credentials.gemini_api_key),
            search=SerperSearchAPI(credentials.serper_api_key),
            fallback_llm=DeepSeekClient(credentials.deepseek_api_key),
            default_model=default_model,
        )

    # ────────────────────────────────────────────────────────────
    #  Public Interfaces
    # ────────────────────────────────────────────────────────────

    async def execute(
        self,
        prompt: str,
        schema: Optional[SchemaNode] = None,
        use_grounded_search: bool = False,
        *,
        model: Optional[str] = None,
    ) -> QueryResult:
        request = QueryRequest(
            prompt=prompt,
            response_schema=schema,
            use_grounded_search=use_grounded_search,
            model=model,
        )
        return await self.run(request)

    async def run(self, request: QueryRequest) -> QueryResult:
        model = request.model or self.default_model
        attrs = {
            "model": model,
            "grounded": request.use_grounded_search,
            "structured": request.response_schema is not None,
        }
        with otel_span("grounded_query.execute", attrs) as sp:
            try:
                raw_text, sources = await self._run_primary(request, model)
                engine = Engine.PRIMARY
            except Exception as exc:
                if not request.use_grounded_search:
                    log_exception(
                        "Primary backend failed; no fallback for ungrounded query",
                        exc,
                        model=model,
                    )
                    raise
                logger.warning(
                    "Primary backend failed, attempting fallback",
                    error=str(exc),
                    error_type=type(exc).__name__,
                    model=model,
                )
                try:
                    raw_text, sources = await self._run_fallback(request)
                except Exception as fallback_exc:
                    logger.error(
                        "Fallback backend failed",
                        error=str(fallback_exc),
                        error_type=type(fallback_exc).__name__,
                        primary_error=str(exc),
                    )
                    raise
                engine = Engine.FALLBACK

            result = self._normalise(raw_text, sources, engine, request.response_schema)
            set_span_attrs(
                sp,
                engine=engine.value,
                sources=len(result.sources),
                parse_error=result.parse_error is not None,
            )

        logger.info(
            "Grounded query completed",
            engine=engine.value,
            model=model if engine is Engine.PRIMARY else self.fallback_llm.model,
            grounded=request.use_grounded_search,
            sources=len(result.sources),
            parsed=result.parsed_json is not None,
        )
        return result

    # ────────────────────────────────────────────────────────────
    #  Private Helper Methods
    # ────────────────────────────────────────────────────────────

    async def _run_primary(self, request: QueryRequest, model: str) -> tuple[str, List[Citation]]:
        tools = [web_search_tool()] if request.use_grounded_search else None
        response = await self.primary.generate(
            request.prompt,
            model=model,
            response_schema=request.response_schema,
            tools=tools,
        )
        sources = extract_grounding_citations(response.payload) if request.use_grounded_search else []
        return response.text or "", sources

    async def _run_fallback(self, request: QueryRequest) -> tuple[str, List[Citation]]:
        # Search first: the LLM prompt is built from its results
        results = await self.search.search(request.prompt, self.search_config)
        context = build_search_context(results)
        sources = citations_from_results(results)

        text = await self.fallback_llm.complete(
            build_system_prompt(request.response_schema),
            build_user_prompt(context, request.prompt),
            json_mode=request.response_schema is not None,
        )
        return text or "", sources

    @staticmethod
    def _normalise(
        raw_text: str,
        sources: List[Citation],
        engine: Engine,
        schema: Optional[SchemaNode],
    ) -> QueryResult:
        if schema is None:
            return QueryResult(raw_text=raw_text, sources=sources, engine_used=engine)

        parsed, error = parse_json_payload(raw_text)
        if error is not None:
            logger.warning(
                "Structured response did not parse as JSON",
                engine=engine.value,
                error=error,
                response_length=len(raw_text),
            )
        return QueryResult(
            raw_text=raw_text,
            parsed_json=parsed,
            sources=sources,
            engine_used=engine,
            schema_requested=True,
            parse_error=error,
        )
