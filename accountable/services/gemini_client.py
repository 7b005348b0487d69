"""
Gemini client (primary backend)
-------------------------------
Thin async wrapper around the Gemini ``generateContent`` REST endpoint.

Notes
- The API key is injected by the caller; it is never read from the
  environment here.
- Every ``generate`` call opens and closes its own HTTP session, so concurrent
  queries share nothing.
- Grounding references come back under
  ``candidates[0].groundingMetadata.groundingChunks`` as either ``web`` or
  ``maps`` records; the helpers at the bottom normalise both.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import aiohttp
import structlog

from ..core.config import GEMINI_API_BASE, GEMINI_TIMEOUT_SEC
from ..models.query import Citation
from ..models.schema import SchemaNode
from ..utils.error_handling import PrimaryBackendError
from ..utils.otel import otel_span, set_span_attrs

logger = structlog.get_logger(__name__)

PROVIDER = "gemini"


@dataclass
class GeminiResponse:
    text: str
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def grounding_chunks(self) -> List[Dict[str, Any]]:
        return grounding_chunks(self.payload)


# ────────────────────────────────────────────────────────────
#  Tool directives
# ────────────────────────────────────────────────────────────

def web_search_tool() -> Dict[str, Any]:
    return {"google_search": {}}


def maps_tool() -> Dict[str, Any]:
    return {"google_maps": {}}


def maps_tool_config(latitude: Optional[float], longitude: Optional[float]) -> Optional[Dict[str, Any]]:
    if latitude is None or longitude is None:
        return None
    return {"retrievalConfig": {"latLng": {"latitude": latitude, "longitude": longitude}}}


class GeminiClient:
    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = GEMINI_API_BASE,
        timeout_seconds: float = GEMINI_TIMEOUT_SEC,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def _sess(self) -> aiohttp.ClientSession:
        return aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout_seconds))

    def build_request(
        self,
        prompt: str,
        *,
        response_schema: Optional[SchemaNode] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_config: Optional[Dict[str, Any]] = None,
        system_instruction: Optional[str] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }
        if system_instruction:
            body["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if tools:
            body["tools"] = tools
        if tool_config:
            body["toolConfig"] = tool_config
        if response_schema is not None:
            body["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": response_schema.to_provider_dict(),
            }
        return body

    async def generate(
        self,
        prompt: str,
        *,
        model: str,
        response_schema: Optional[SchemaNode] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_config: Optional[Dict[str, Any]] = None,
        system_instruction: Optional[str] = None,
    ) -> GeminiResponse:
        """Send one ``generateContent`` request.

        Raises:
            PrimaryBackendError: on transport failure, non-2xx status or a body
                that is not a JSON object.
        """
        url = f"{self.base_url}/models/{model}:generateContent"
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }
        body = self.build_request(
            prompt,
            response_schema=response_schema,
            tools=tools,
            tool_config=tool_config,
            system_instruction=system_instruction,
        )

        attrs = {
            "provider": PROVIDER,
            "model": model,
            "structured": response_schema is not None,
            "tools": len(tools or []),
        }
        with otel_span("llm.gemini.generate", attrs) as sp:
            t0 = time.perf_counter()
            try:
                async with self._sess() as session:
                    async with session.post(url, json=body, headers=headers) as r:
                        if r.status < 200 or r.status >= 300:
                            detail = await r.text()
                            raise PrimaryBackendError(
                                f"Gemini returned HTTP {r.status}: {detail[:300]}",
                                provider=PROVIDER,
                                status=r.status,
                            )
                        try:
                            payload = await r.json(content_type=None)
                        except ValueError as exc:
                            raise PrimaryBackendError(
                                f"Gemini returned a non-JSON body: {exc}", provider=PROVIDER
                            ) from exc
            except PrimaryBackendError:
                raise
            except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
                raise PrimaryBackendError(f"Gemini request failed: {exc}", provider=PROVIDER) from exc

            if not isinstance(payload, dict):
                raise PrimaryBackendError("Gemini returned a non-object body", provider=PROVIDER)

            text = extract_text(payload)
            set_span_attrs(
                sp,
                latency_ms=int((time.perf_counter() - t0) * 1000),
                success=True,
            )

        logger.info(
            "Gemini completion received",
            model=model,
            response_length=len(text),
            grounding_chunks=len(grounding_chunks(payload)),
        )
        return GeminiResponse(text=text, payload=payload)


# ────────────────────────────────────────────────────────────
#  Response Extraction Utilities
# ────────────────────────────────────────────────────────────

def _first_candidate(payload: Dict[str, Any]) -> Dict[str, Any]:
    candidates = payload.get("candidates") if isinstance(payload, dict) else None
    if isinstance(candidates, list) and candidates and isinstance(candidates[0], dict):
        return candidates[0]
    return {}


def extract_text(payload: Dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate (thought parts skipped)."""
    content = _first_candidate(payload).get("content") or {}
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ""
    texts = [
        p["text"]
        for p in parts
        if isinstance(p, dict) and isinstance(p.get("text"), str) and not p.get("thought")
    ]
    return "".join(texts)


def grounding_chunks(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    meta = _first_candidate(payload).get("groundingMetadata") or {}
    chunks = meta.get("groundingChunks") if isinstance(meta, dict) else None
    if not isinstance(chunks, list):
        return []
    return [c for c in chunks if isinstance(c, dict)]


def _clean(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def extract_grounding_citations(payload: Dict[str, Any]) -> List[Citation]:
    """Citations from grounding chunks, in backend order.

    A chunk is kept only when its ``web`` (or ``maps``) record carries both a
    non-blank ``uri`` and a non-blank ``title``.
    """
    citations: List[Citation] = []
    for chunk in grounding_chunks(payload):
        record = chunk.get("web") or chunk.get("maps")
        if not isinstance(record, dict):
            continue
        uri = _clean(record.get("uri"))
        title = _clean(record.get("title"))
        if uri and title:
            citations.append(Citation(title=title, uri=uri))
    return citations


def extract_map_places(payload: Dict[str, Any], default_title: str = "Location") -> List[Citation]:
    """Map-place references with a URI; a missing title becomes ``default_title``."""
    places: List[Citation] = []
    for chunk in grounding_chunks(payload):
        record = chunk.get("maps")
        if not isinstance(record, dict):
            continue
        uri = _clean(record.get("uri"))
        if uri:
            places.append(Citation(title=_clean(record.get("title")) or default_title, uri=uri))
    return places
