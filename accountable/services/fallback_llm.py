"""
DeepSeek client (fallback LLM)
------------------------------
DeepSeek exposes an OpenAI-compatible Chat Completions API, so the fallback
uses ``openai.AsyncOpenAI`` pointed at the DeepSeek base URL. SDK retries are
disabled: the only retry in the system is the primary→fallback hand-off.
"""

from __future__ import annotations

import time
from typing import Optional

import structlog
from openai import AsyncOpenAI, OpenAIError

from ..core.config import DEEPSEEK_API_BASE, DEEPSEEK_MODEL, DEEPSEEK_TIMEOUT_SEC
from ..models.schema import SchemaNode
from ..utils.error_handling import FallbackBackendError
from ..utils.otel import otel_span, set_span_attrs

logger = structlog.get_logger(__name__)

PROVIDER = "deepseek"

_FREEFORM_SYSTEM_PROMPT = (
    "You are a civic intelligence assistant. Summarize the provided context objectively."
)
_STRUCTURED_SYSTEM_PROMPT = (
    "You are a civic data parser. Use the provided context to answer. "
    "Return ONLY raw JSON matching this schema: {schema}"
)


def build_system_prompt(schema: Optional[SchemaNode]) -> str:
    if schema is None:
        return _FREEFORM_SYSTEM_PROMPT
    return _STRUCTURED_SYSTEM_PROMPT.format(schema=schema.to_json())


def build_user_prompt(context: str, prompt: str) -> str:
    return f"CONTEXT:\n{context}\n\nQUERY: {prompt}"


class DeepSeekClient:
    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEEPSEEK_API_BASE,
        model: str = DEEPSEEK_MODEL,
        timeout_seconds: float = DEEPSEEK_TIMEOUT_SEC,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.timeout_seconds = timeout_seconds

    def _client(self) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            timeout=self.timeout_seconds,
            max_retries=0,
        )

    async def complete(self, system_prompt: str, user_prompt: str, *, json_mode: bool) -> str:
        """Return the first choice's content.

        Raises:
            FallbackBackendError: on any SDK error or an empty choice list.
        """
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        response_format = {"type": "json_object"} if json_mode else {"type": "text"}

        with otel_span(
            "llm.deepseek.chat_completions",
            {"provider": PROVIDER, "model": self.model, "structured": json_mode},
        ) as sp:
            t0 = time.perf_counter()
            try:
                async with self._client() as client:
                    response = await client.chat.completions.create(
                        model=self.model,
                        messages=messages,
                        response_format=response_format,
                    )
            except OpenAIError as exc:
                raise FallbackBackendError(
                    f"DeepSeek request failed: {exc}",
                    provider=PROVIDER,
                    status=getattr(exc, "status_code", None),
                ) from exc

            choices = getattr(response, "choices", None)
            if not choices:
                raise FallbackBackendError("DeepSeek returned no choices", provider=PROVIDER)
            content = choices[0].message.content or ""
            set_span_attrs(sp, latency_ms=int((time.perf_counter() - t0) * 1000), success=True)

        logger.info(
            "DeepSeek completion received",
            model=self.model,
            response_length=len(content),
            json_mode=json_mode,
        )
        return content
