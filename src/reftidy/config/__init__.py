"""Application configuration helpers."""

from __future__ import annotations

from .crossref import CrossrefConfig, get_crossref_config
from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .openalex import OpenAlexConfig, get_openalex_config
from .storage import StorageConfig, get_storage_config
from .zotero import ZoteroConfig, get_zotero_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "CrossrefConfig",
    "MissingConfigurationError",
    "OpenAlexConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "ZoteroConfig",
    "configure_logging",
    "get_crossref_config",
    "get_openalex_config",
    "get_storage_config",
    "get_zotero_config",
    "optional_env_var",
    "require_env_vars",
]
