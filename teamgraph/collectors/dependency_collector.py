#!/usr/bin/env python3
"""
Async Dependency Collector

Fetches the two epic-level dependency snapshot collections for a PI from the
metrics backend:
    - outbound: which teams each team relies on
    - inbound: how much work each team is relied upon for

Both collections are requested concurrently over one pooled client and the
collector only returns once both have resolved. Either one failing raises
FetchError; partial snapshots are never returned.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import httpx

from teamgraph.async_http_client import AsyncSecureHTTPClient
from teamgraph.core.logging_config import get_logger, log_with_context
from teamgraph.secure_config import DashboardApiConfig, get_config
from teamgraph.utils.error_handling import FetchError, with_async_retry

logger = get_logger(__name__)

OUTBOUND_ENDPOINT = "/issues/epic-outbound-dependency-metrics-by-quarter"
INBOUND_ENDPOINT = "/issues/epic-inbound-dependency-load-by-quarter"
PIS_ENDPOINT = "/pis/getPis"


@dataclass(frozen=True)
class DependencySnapshot:
    """
    Raw rows of both perspectives for one PI.

    Attributes:
        pi: Program increment the rows belong to (None = backend default)
        outbound: Rows from the outbound endpoint
        inbound: Rows from the inbound endpoint
        fetched_at: When both collections had resolved
    """

    pi: str | None
    outbound: list[dict] = field(default_factory=list)
    inbound: list[dict] = field(default_factory=list)
    fetched_at: datetime = field(default_factory=datetime.now)

    @property
    def is_empty(self) -> bool:
        return not self.outbound and not self.inbound


@with_async_retry(max_attempts=3, backoff_seconds=1.0, exceptions=(httpx.TransportError,))
async def _get_with_retry(client: AsyncSecureHTTPClient, url: str, params: dict[str, str]) -> httpx.Response:
    return await client.get(url, params=params)


def unwrap_envelope(body: Any, endpoint: str) -> Any:
    """
    Extract the payload from a backend response body.

    Accepts the {success, data, message} envelope or a bare JSON list.

    Raises:
        FetchError: If the backend reported failure or the shape is unexpected
    """
    if isinstance(body, list):
        return body

    if not isinstance(body, dict):
        raise FetchError(f"Unexpected response from {endpoint}: {type(body).__name__}", endpoint=endpoint)

    if body.get("success") is False:
        message = body.get("message") or "backend reported failure"
        raise FetchError(f"{endpoint} failed: {message}", endpoint=endpoint)

    if "data" not in body:
        raise FetchError(f"Response from {endpoint} has no data field", endpoint=endpoint)

    return body["data"]


class AsyncDependencyCollector:
    """Async collector for team dependency snapshots"""

    def __init__(
        self,
        api_config: DashboardApiConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the collector.

        Args:
            api_config: Backend configuration (default: from environment via get_config())
            transport: Optional httpx transport, passed through to the HTTP client
        """
        self.config = api_config or get_config().get_api_config()
        self.transport = transport

    def _client(self) -> AsyncSecureHTTPClient:
        return AsyncSecureHTTPClient(timeout=self.config.timeout_seconds, transport=self.transport)

    async def _fetch_json(self, client: AsyncSecureHTTPClient, endpoint: str, params: dict[str, str]) -> Any:
        """
        GET an endpoint and return its unwrapped payload.

        Raises:
            FetchError: On transport failure, non-2xx status, non-JSON body or bad envelope
        """
        url = self.config.endpoint_url(endpoint)

        try:
            response = await _get_with_retry(client, url, params)
        except httpx.TransportError as e:
            raise FetchError(f"Request to {endpoint} failed: {e}", endpoint=endpoint) from e

        if response.is_error:
            raise FetchError(
                f"{endpoint} returned HTTP {response.status_code}",
                endpoint=endpoint,
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise FetchError(f"{endpoint} returned a non-JSON body", endpoint=endpoint) from e

        return unwrap_envelope(body, endpoint)

    async def _fetch_collection(self, client: AsyncSecureHTTPClient, endpoint: str, pi: str | None) -> list[dict]:
        params = {"pi": pi} if pi else {}
        payload = await self._fetch_json(client, endpoint, params)

        if payload is None:
            return []
        if not isinstance(payload, list):
            raise FetchError(f"Expected a list of rows from {endpoint}, got {type(payload).__name__}", endpoint=endpoint)

        return [row for row in payload if isinstance(row, dict)]

    async def fetch_dependencies(self, pi: str | None = None) -> DependencySnapshot:
        """
        Fetch outbound and inbound rows for a PI concurrently.

        Args:
            pi: Program increment, e.g. "Q32025" (None = backend default)

        Returns:
            DependencySnapshot with both collections

        Raises:
            FetchError: If either collection could not be retrieved
        """
        logger.info(f"Fetching team dependencies for PI {pi or '(default)'}")

        async with self._client() as client:
            results = await asyncio.gather(
                self._fetch_collection(client, OUTBOUND_ENDPOINT, pi),
                self._fetch_collection(client, INBOUND_ENDPOINT, pi),
                return_exceptions=True,
            )

        outbound, inbound = results
        for result in results:
            if isinstance(result, FetchError):
                raise result
            if isinstance(result, Exception):
                raise FetchError(f"Dependency fetch failed: {result}") from result
            if isinstance(result, BaseException):
                raise result

        log_with_context(logger, "info", "Dependencies fetched", pi=pi, outbound=len(outbound), inbound=len(inbound))
        return DependencySnapshot(pi=pi, outbound=outbound, inbound=inbound)

    async def fetch_available_pis(self) -> list[str]:
        """
        List PI names known to the backend.

        Raises:
            FetchError: If the list could not be retrieved
        """
        async with self._client() as client:
            payload = await self._fetch_json(client, PIS_ENDPOINT, {})

        pis = payload.get("pis") if isinstance(payload, dict) else payload
        if not isinstance(pis, list):
            raise FetchError(f"Unexpected PI list from {PIS_ENDPOINT}", endpoint=PIS_ENDPOINT)

        names = [pi.get("pi_name") if isinstance(pi, dict) else pi for pi in pis]
        return [name for name in names if isinstance(name, str) and name]

