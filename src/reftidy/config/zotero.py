"""Zotero Web API configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, cast

from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

ZOTERO_BASE_URL = "https://api.zotero.org"
ZOTERO_API_VERSION = "3"
ZOTERO_TIMEOUT_SECONDS = 30.0
ZOTERO_PAGE_SIZE = 100

LibraryType = Literal["user", "group"]


@dataclass(frozen=True, slots=True)
class ZoteroConfig:
    """Holds Zotero API configuration values."""

    api_key: str
    library_id: str
    library_type: LibraryType
    resilience: ResilienceConfig
    page_size: int = ZOTERO_PAGE_SIZE

    @property
    def library_path(self) -> str:
        return f"/{self.library_type}s/{self.library_id}"


def get_zotero_config(*, resilience: ResilienceConfig | None = None) -> ZoteroConfig:
    values = require_env_vars(("ZOTERO_API_KEY", "ZOTERO_LIBRARY_ID"))
    library_type = optional_env_var("ZOTERO_LIBRARY_TYPE", "user")
    if library_type not in ("user", "group"):
        raise ConfigurationError(
            f"ZOTERO_LIBRARY_TYPE must be 'user' or 'group', got {library_type!r}"
        )
    return ZoteroConfig(
        api_key=values["ZOTERO_API_KEY"],
        library_id=values["ZOTERO_LIBRARY_ID"],
        library_type=cast(LibraryType, library_type),
        resilience=resilience or default_zotero_resilience(api_key=values["ZOTERO_API_KEY"]),
    )


def default_zotero_resilience(*, api_key: str) -> ResilienceConfig:
    return ResilienceConfig(
        name="zotero",
        base_url=ZOTERO_BASE_URL,
        timeout_seconds=ZOTERO_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=3),
        ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
        cache=CacheConfig(enabled=False),
        default_headers={
            "Zotero-API-Key": api_key,
            "Zotero-API-Version": ZOTERO_API_VERSION,
        },
    )
