"""
Async Secure HTTP Client Wrapper

Async GET access to the metrics backend with enforced TLS verification,
timeouts and connection pooling. Built on httpx so both dependency collections
can be fetched concurrently over one pooled connection set.

Usage:
    from teamgraph.async_http_client import AsyncSecureHTTPClient

    async with AsyncSecureHTTPClient(timeout=api_config.timeout_seconds) as client:
        response = await client.get(url, params={"pi": "Q32025"})
"""

import httpx


class AsyncSecureHTTPClient:
    """
    Async HTTP client with enforced SSL verification and connection pooling.

    Features:
    - Context manager for automatic connection cleanup
    - HTTP/2 support for multiplexing
    - JSON Accept header on every request
    """

    DEFAULT_TIMEOUT = 30  # seconds
    DEFAULT_MAX_CONNECTIONS = 10
    DEFAULT_MAX_KEEPALIVE = 5
    DEFAULT_HEADERS = {"Accept": "application/json"}

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_connections: int = DEFAULT_MAX_CONNECTIONS,
        max_keepalive_connections: int = DEFAULT_MAX_KEEPALIVE,
        http2: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize async HTTP client.

        Args:
            timeout: Default timeout in seconds (default: 30)
            max_connections: Maximum number of concurrent connections (default: 10)
            max_keepalive_connections: Max persistent connections (default: 5)
            http2: Enable HTTP/2 support (default: True)
            transport: Optional httpx transport (e.g. httpx.MockTransport in tests)
        """
        self.limits = httpx.Limits(max_connections=max_connections, max_keepalive_connections=max_keepalive_connections)
        self.timeout = httpx.Timeout(timeout)
        self.http2 = http2
        self.transport = transport
        self.client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "AsyncSecureHTTPClient":
        """Context manager entry - create async client"""
        self.client = httpx.AsyncClient(
            limits=self.limits,
            timeout=self.timeout,
            verify=True,  # CRITICAL: Force SSL verification
            http2=self.http2,
            follow_redirects=True,
            headers=self.DEFAULT_HEADERS,
            transport=self.transport,
        )
        return self

    async def __aexit__(self, *args):
        """Context manager exit - close connections"""
        if self.client:
            await self.client.aclose()
            self.client = None

    async def get(self, url: str, **kwargs) -> httpx.Response:
        """
        Async GET request with SSL verification enforced.

        Args:
            url: URL to fetch
            **kwargs: Additional arguments to pass to httpx.AsyncClient.get()

        Returns:
            httpx.Response: HTTP response

        Raises:
            RuntimeError: If used outside the async context manager
        """
        if not self.client:
            raise RuntimeError("Client not initialized. Use 'async with AsyncSecureHTTPClient()' context manager")

        return await self.client.get(url, **kwargs)
