"""HTTP transport for JSON-RPC calls."""

import httpx

from noderpc.config import (
    CONNECT_TIMEOUT,
    DEFAULT_HTTP_TIMEOUT,
    KEEPALIVE_EXPIRY,
    MAX_IDLE_CONNECTIONS,
)


def new_http_client(
    timeout: float = DEFAULT_HTTP_TIMEOUT,
    max_idle_connections: int = MAX_IDLE_CONNECTIONS,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Create a pooled HTTP client bounded by an overall request timeout.

    Idle keep-alive connections are capped and expire after
    KEEPALIVE_EXPIRY seconds. Connecting is bounded separately by
    CONNECT_TIMEOUT (or the overall timeout, whichever is shorter).
    """
    limits = httpx.Limits(
        max_connections=None,
        max_keepalive_connections=max_idle_connections,
        keepalive_expiry=KEEPALIVE_EXPIRY,
    )
    return httpx.Client(
        timeout=httpx.Timeout(timeout, connect=min(CONNECT_TIMEOUT, timeout)),
        limits=limits,
        transport=transport,
    )
