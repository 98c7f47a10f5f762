"""
HTTP client utilities with sane defaults for clocker.
"""
from __future__ import annotations
import httpx


def create_http_client(
    timeout: float = 20.0,
    user_agent: str = "clocker/0.1",
    **kwargs
) -> httpx.AsyncClient:
    """
    Create a configured async HTTP client with:
    - Sane timeout defaults (20s, 10s to connect)
    - Custom user-agent
    - No transport retries: clock in/out must never be replayed blindly
    """
    headers = kwargs.pop("headers", {})
    headers.setdefault("User-Agent", user_agent)

    timeout_config = httpx.Timeout(timeout, connect=10.0)
    transport = httpx.AsyncHTTPTransport(retries=0)

    return httpx.AsyncClient(
        timeout=timeout_config,
        headers=headers,
        transport=transport,
        **kwargs
    )
