"""Mock transports for adapter tests."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeAlias

import httpx

from reftidy.adapters.http_resilience import ResilientClient

if TYPE_CHECKING:
    from collections.abc import Callable

    from reftidy.config.http_resilience import ResilienceConfig

    Handler: TypeAlias = Callable[[httpx.Request], httpx.Response]


def mock_client_factory(handler: Handler) -> Callable[[ResilienceConfig], ResilientClient]:
    """Client factory whose clients answer every request with ``handler``."""

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        return ResilientClient(resilience, transport=httpx.MockTransport(handler))

    return factory
