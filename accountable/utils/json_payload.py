"""Lenient JSON parsing for model text."""

from __future__ import annotations

import json
import re
from typing import Any, Optional, Tuple

# First ```json ... ``` (or bare ```) block, wherever it sits in the text
_FENCE_RE = re.compile(r"```(?:json|JSON)?[ \t]*\n?(.*?)\n?[ \t]*```", re.DOTALL)


def strip_code_fence(text: str) -> str:
    """Return the body of the first fenced block, or the text unchanged.

    Models often wrap JSON in a Markdown fence and sometimes put a line of
    prose ("Here are the events:") before it.
    """
    match = _FENCE_RE.search(text or "")
    if match:
        return match.group(1)
    return text or ""


def parse_json_payload(text: str) -> Tuple[Optional[Any], Optional[str]]:
    """Parse model text as JSON.

    Returns ``(value, None)`` on success and ``(None, error)`` on failure.
    A JSON ``null`` literal parses to ``(None, None)``.
    """
    candidate = strip_code_fence(text).strip()
    if not candidate:
        return None, "empty response"
    try:
        return json.loads(candidate), None
    except (json.JSONDecodeError, ValueError) as exc:
        return None, str(exc)
