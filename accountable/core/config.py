"""
Core configuration and settings for the Accountable India backend

Provider endpoints, default models and timeouts live here as env-overridable
module constants so nothing else in the codebase hard-codes a URL or model
name. API keys are *not* read by the services themselves: they are gathered
into :class:`ProviderCredentials` and injected into the executor.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)) or default)
    except Exception:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)) or default)
    except Exception:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes"}


def get_environment() -> str:
    """Get current environment"""
    return os.getenv("ENVIRONMENT", "development")


def is_production() -> bool:
    """Check if running in production"""
    return get_environment() == "production"


TRUSTED_ORIGINS: List[str] = [
    o.strip()
    for o in os.getenv(
        "TRUSTED_ORIGINS",
        "http://localhost:5173,http://localhost:3000",
    ).split(",")
    if o.strip()
]


# ────────────────────────────────────────────────────────────
#  Primary backend (Gemini generateContent REST API)
# ────────────────────────────────────────────────────────────

GEMINI_API_BASE: str = os.getenv(
    "GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"
)
GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-3-flash-preview")
# Maps grounding is only served by the 2.5 family
GEMINI_MAPS_MODEL: str = os.getenv("GEMINI_MAPS_MODEL", "gemini-2.5-flash")
GEMINI_TIMEOUT_SEC: float = _env_float("GEMINI_TIMEOUT_SEC", 120.0)


# ────────────────────────────────────────────────────────────
#  Fallback backends (Serper search + DeepSeek chat)
# ────────────────────────────────────────────────────────────

SERPER_API_URL: str = os.getenv("SERPER_API_URL", "https://google.serper.dev/search")
SEARCH_COUNTRY: str = os.getenv("SEARCH_COUNTRY", "in")
SEARCH_LANGUAGE: str = os.getenv("SEARCH_LANGUAGE", "en")
SEARCH_MAX_RESULTS: int = _env_int("SEARCH_MAX_RESULTS", 10)
SEARCH_API_TIMEOUT_SEC: float = _env_float("SEARCH_API_TIMEOUT_SEC", 30.0)

DEEPSEEK_API_BASE: str = os.getenv("DEEPSEEK_API_BASE", "https://api.deepseek.com")
DEEPSEEK_MODEL: str = os.getenv("DEEPSEEK_MODEL", "deepseek-chat")
DEEPSEEK_TIMEOUT_SEC: float = _env_float("DEEPSEEK_TIMEOUT_SEC", 120.0)


# ────────────────────────────────────────────────────────────
#  Feature Flags
# ────────────────────────────────────────────────────────────

# Expose /docs and /redoc outside production
ENABLE_API_DOCS: bool = _env_bool("ENABLE_API_DOCS", not is_production())


@dataclass(frozen=True)
class ProviderCredentials:
    """API keys for the three external backends.

    Empty keys are allowed: the provider rejects the request at call time,
    which for grounded queries triggers the fallback path.
    """

    gemini_api_key: str = ""
    serper_api_key: str = ""
    deepseek_api_key: str = ""

    @classmethod
    def from_env(cls) -> "ProviderCredentials":
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or "",
            serper_api_key=os.getenv("SERP_API_KEY") or os.getenv("SERPER_API_KEY") or "",
            deepseek_api_key=os.getenv("DEEPSEEK_API_KEY") or "",
        )

    def configured(self) -> dict:
        """Which keys are present, without leaking the values."""
        return {
            "gemini": bool(self.gemini_api_key),
            "serper": bool(self.serper_api_key),
            "deepseek": bool(self.deepseek_api_key),
        }
