"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

ALLOWED_LLM_ADAPTERS = frozenset({"openai", "mock"})

DENOMINATOR_ALL_SITES = "all_sites"
DENOMINATOR_PRIMARY_ONLY = "primary_only"
ALLOWED_DENOMINATORS = frozenset({DENOMINATOR_ALL_SITES, DENOMINATOR_PRIMARY_ONLY})

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def resolve_llm_api_key() -> str | None:
    """
    Return the LLM credential. LLM_API_KEY wins over OPENAI_API_KEY.
    """

    return _get_optional_str_env("LLM_API_KEY") or _get_optional_str_env("OPENAI_API_KEY")


@dataclass(frozen=True)
class LLMSettings:
    """
    Entity-extraction model settings.
    """

    adapter: str = "openai"
    api_key: str | None = None
    model: str = "gpt-4o"
    base_url: str | None = None
    max_tokens: int = 2048


@dataclass(frozen=True)
class SearchSettings:
    """
    Competitor discovery search API settings.
    """

    api_key: str | None = None
    base_url: str = "https://serpapi.com/search.json"
    engine: str = "google"
    timeout_seconds: float = 15.0
    max_results: int = 10


@dataclass(frozen=True)
class FetchSettings:
    """
    Page content fetch settings.
    """

    timeout_seconds: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    max_content_length: int = 8000


@dataclass(frozen=True)
class AnalysisSettings:
    """
    Pipeline tuning for the analyze endpoint.
    """

    cache_ttl_seconds: float = 600.0
    max_urls_per_request: int = 10
    prompt_content_length: int = 4000
    competitor_batch_size: int = 3
    competitor_batch_pause_seconds: float = 1.0
    market_intel_denominator: str = DENOMINATOR_PRIMARY_ONLY


@dataclass(frozen=True)
class AnalysisCapabilities:
    """
    Which optional pipeline stages are usable with the configured credentials.
    """

    llm_configured: bool
    competitor_discovery: bool


@lru_cache(maxsize=1)
def get_llm_settings() -> LLMSettings:
    """
    Return cached LLM settings from environment variables.
    """

    return LLMSettings(
        adapter=_get_str_env("LLM_ADAPTER", "openai").lower(),
        api_key=resolve_llm_api_key(),
        model=_get_str_env("LLM_MODEL", "gpt-4o"),
        base_url=_get_optional_str_env("LLM_BASE_URL"),
        max_tokens=max(64, _get_int_env("LLM_MAX_TOKENS", 2048)),
    )


@lru_cache(maxsize=1)
def get_search_settings() -> SearchSettings:
    """
    Return cached search API settings from environment variables.
    """

    return SearchSettings(
        api_key=_get_optional_str_env("SERPAPI_API_KEY"),
        base_url=_get_str_env("SEARCH_BASE_URL", "https://serpapi.com/search.json"),
        engine=_get_str_env("SEARCH_ENGINE", "google"),
        timeout_seconds=max(1.0, _get_float_env("SEARCH_TIMEOUT_SECONDS", 15.0)),
        max_results=max(1, _get_int_env("COMPETITOR_MAX_RESULTS", 10)),
    )


@lru_cache(maxsize=1)
def get_fetch_settings() -> FetchSettings:
    """
    Return cached page fetch settings from environment variables.
    """

    return FetchSettings(
        timeout_seconds=max(1.0, _get_float_env("FETCH_TIMEOUT_SECONDS", 10.0)),
        user_agent=_get_str_env("FETCH_USER_AGENT", DEFAULT_USER_AGENT),
        max_content_length=max(100, _get_int_env("CONTENT_MAX_LENGTH", 8000)),
    )


@lru_cache(maxsize=1)
def get_analysis_settings() -> AnalysisSettings:
    """
    Return cached pipeline tuning settings from environment variables.
    """

    return AnalysisSettings(
        cache_ttl_seconds=max(0.0, _get_float_env("ANALYSIS_CACHE_TTL_SECONDS", 600.0)),
        max_urls_per_request=max(1, _get_int_env("MAX_URLS_PER_REQUEST", 10)),
        prompt_content_length=max(100, _get_int_env("PROMPT_CONTENT_LENGTH", 4000)),
        competitor_batch_size=max(1, _get_int_env("COMPETITOR_BATCH_SIZE", 3)),
        competitor_batch_pause_seconds=max(
            0.0, _get_float_env("COMPETITOR_BATCH_PAUSE_SECONDS", 1.0)
        ),
        market_intel_denominator=_get_str_env(
            "MARKET_INTEL_DENOMINATOR", DENOMINATOR_PRIMARY_ONLY
        ).lower(),
    )


def get_analysis_capabilities() -> AnalysisCapabilities:
    """
    Derive pipeline capabilities from the configured credentials.

    The mock adapter needs no credential. Competitor discovery is available
    only when a search API key is present.
    """

    llm_settings = get_llm_settings()
    search_settings = get_search_settings()
    return AnalysisCapabilities(
        llm_configured=llm_settings.adapter == "mock" or bool(llm_settings.api_key),
        competitor_discovery=bool(search_settings.api_key),
    )


def clear_settings_cache() -> None:
    """
    Drop cached settings so the next read sees the current environment.
    """

    get_llm_settings.cache_clear()
    get_search_settings.cache_clear()
    get_fetch_settings.cache_clear()
    get_analysis_settings.cache_clear()
