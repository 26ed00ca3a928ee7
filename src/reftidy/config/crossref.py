"""Crossref REST API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

CROSSREF_BASE_URL = "https://api.crossref.org"
CROSSREF_TIMEOUT_SECONDS = 15.0
_USER_AGENT = "reftidy/1.0"


@dataclass(frozen=True, slots=True)
class CrossrefConfig:
    resilience: ResilienceConfig
    search_rows: int = 5


def _should_cache_payload(payload: object) -> bool:
    return isinstance(payload, dict) and payload.get("status") == "ok"


def get_crossref_config() -> CrossrefConfig:
    mailto = optional_env_var("CROSSREF_MAILTO")
    # Crossref routes requests carrying a contact address to its "polite" pool
    user_agent = f"{_USER_AGENT} (mailto:{mailto})" if mailto else _USER_AGENT

    resilience = ResilienceConfig(
        name="crossref",
        base_url=CROSSREF_BASE_URL,
        timeout_seconds=CROSSREF_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        retry=RetryPolicy(total=3),
        cache=CacheConfig(enabled=True, backend="sqlite", should_cache=_should_cache_payload),
        default_headers={"User-Agent": user_agent, "Accept": "application/json"},
    )
    return CrossrefConfig(resilience=resilience)
