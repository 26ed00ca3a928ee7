"""OpenAlex API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

OPENALEX_BASE_URL = "https://api.openalex.org"
OPENALEX_TIMEOUT_SECONDS = 15.0


@dataclass(frozen=True, slots=True)
class OpenAlexConfig:
    resilience: ResilienceConfig
    per_page: int = 3
    mailto: str | None = None


def _should_cache_payload(payload: object) -> bool:
    return isinstance(payload, dict) and isinstance(payload.get("results"), list)


def get_openalex_config() -> OpenAlexConfig:
    resilience = ResilienceConfig(
        name="openalex",
        base_url=OPENALEX_BASE_URL,
        timeout_seconds=OPENALEX_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        retry=RetryPolicy(total=3),
        cache=CacheConfig(enabled=True, backend="sqlite", should_cache=_should_cache_payload),
        default_headers={"Accept": "application/json"},
    )
    # requests carrying mailto are served from the faster "polite" pool
    return OpenAlexConfig(resilience=resilience, mailto=optional_env_var("OPENALEX_MAILTO"))
