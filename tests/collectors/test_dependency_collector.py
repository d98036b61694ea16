"""
Tests for Async Dependency Collector

Coverage:
- fetch_dependencies() - both endpoints, PI parameter, envelope and bare-list bodies
- Concurrency: both requests are in flight at the same time (join point)
- Error handling: HTTP errors, backend failure envelopes, non-JSON bodies,
  transport errors with retry
- fetch_available_pis() - PI name extraction
- unwrap_envelope() - response shape handling

Run with:
    pytest tests/collectors/test_dependency_collector.py -v
"""

import asyncio
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from teamgraph.collectors.dependency_collector import (
    INBOUND_ENDPOINT,
    OUTBOUND_ENDPOINT,
    PIS_ENDPOINT,
    AsyncDependencyCollector,
    DependencySnapshot,
    unwrap_envelope,
)
from teamgraph.utils.error_handling import FetchError


def envelope(data, success=True, message="ok"):
    return {"success": success, "data": data, "message": message}


def routing_transport(routes, calls=None):
    """MockTransport answering by URL path; routes map path -> Response or callable(request)"""

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        route = routes[request.url.path]
        return route(request) if callable(route) else route

    return httpx.MockTransport(handler)


@pytest.fixture
def api_paths(api_config):
    root = httpx.URL(api_config.api_root).path
    return {
        "outbound": f"{root}{OUTBOUND_ENDPOINT}",
        "inbound": f"{root}{INBOUND_ENDPOINT}",
        "pis": f"{root}{PIS_ENDPOINT}",
    }


@pytest.fixture
def no_backoff():
    """Skip retry sleeps"""
    with patch("teamgraph.utils.error_handling.asyncio.sleep", new=AsyncMock()) as mock_sleep:
        yield mock_sleep


class TestCollectorInit:
    """Test AsyncDependencyCollector initialization"""

    def test_uses_given_config(self, api_config):
        collector = AsyncDependencyCollector(api_config=api_config)

        assert collector.config is api_config

    def test_loads_config_from_environment(self, api_config):
        with patch("teamgraph.collectors.dependency_collector.get_config") as mock_get_config:
            mock_get_config.return_value.get_api_config.return_value = api_config

            collector = AsyncDependencyCollector()

        assert collector.config is api_config


class TestFetchDependencies:
    """Test fetch_dependencies()"""

    @pytest.mark.asyncio
    async def test_fetches_both_collections(self, api_config, api_paths, outbound_rows, inbound_rows):
        calls = []
        transport = routing_transport(
            {
                api_paths["outbound"]: httpx.Response(200, json=envelope(outbound_rows)),
                api_paths["inbound"]: httpx.Response(200, json=envelope(inbound_rows)),
            },
            calls,
        )
        collector = AsyncDependencyCollector(api_config=api_config, transport=transport)

        snapshot = await collector.fetch_dependencies("Q32025")

        assert isinstance(snapshot, DependencySnapshot)
        assert snapshot.pi == "Q32025"
        assert snapshot.outbound == outbound_rows
        assert snapshot.inbound == inbound_rows
        assert {request.url.params["pi"] for request in calls} == {"Q32025"}
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_bare_list_body_accepted(self, api_config, api_paths, outbound_rows):
        transport = routing_transport(
            {
                api_paths["outbound"]: httpx.Response(200, json=outbound_rows),
                api_paths["inbound"]: httpx.Response(200, json=[]),
            }
        )
        collector = AsyncDependencyCollector(api_config=api_config, transport=transport)

        snapshot = await collector.fetch_dependencies("Q32025")

        assert snapshot.outbound == outbound_rows
        assert snapshot.inbound == []
        assert not snapshot.is_empty

    @pytest.mark.asyncio
    async def test_no_pi_sends_no_parameter(self, api_config, api_paths):
        calls = []
        transport = routing_transport(
            {
                api_paths["outbound"]: httpx.Response(200, json=envelope([])),
                api_paths["inbound"]: httpx.Response(200, json=envelope([])),
            },
            calls,
        )
        collector = AsyncDependencyCollector(api_config=api_config, transport=transport)

        snapshot = await collector.fetch_dependencies()

        assert snapshot.is_empty
        assert all("pi" not in request.url.params for request in calls)

    @pytest.mark.asyncio
    async def test_null_data_is_empty_and_non_dict_rows_skipped(self, api_config, api_paths):
        row = {"owned_team": "A", "relying_on_teams_array": ["B"], "number_of_dependent_issues": 1}
        transport = routing_transport(
            {
                api_paths["outbound"]: httpx.Response(200, json=envelope([row, "junk", 3, None])),
                api_paths["inbound"]: httpx.Response(200, json=envelope(None)),
            }
        )
        collector = AsyncDependencyCollector(api_config=api_config, transport=transport)

        snapshot = await collector.fetch_dependencies("Q32025")

        assert snapshot.outbound == [row]
        assert snapshot.inbound == []

    @pytest.mark.asyncio
    async def test_requests_run_concurrently(self, api_config, api_paths):
        """The outbound response waits for the inbound request; sequential fetching would hang"""
        inbound_arrived = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == api_paths["inbound"]:
                inbound_arrived.set()
                return httpx.Response(200, json=envelope([]))
            await asyncio.wait_for(inbound_arrived.wait(), timeout=2)
            return httpx.Response(200, json=envelope([]))

        collector = AsyncDependencyCollector(api_config=api_config, transport=httpx.MockTransport(handler))

        snapshot = await collector.fetch_dependencies("Q32025")

        assert snapshot.is_empty
        assert inbound_arrived.is_set()

    @pytest.mark.asyncio
    async def test_http_error_raises_fetch_error(self, api_config, api_paths):
        transport = routing_transport(
            {
                api_paths["outbound"]: httpx.Response(200, json=envelope([])),
                api_paths["inbound"]: httpx.Response(500, text="boom"),
            }
        )
        collector = AsyncDependencyCollector(api_config=api_config, transport=transport)

        with pytest.raises(FetchError) as exc_info:
            await collector.fetch_dependencies("Q32025")

        assert exc_info.value.status_code == 500
        assert exc_info.value.endpoint == INBOUND_ENDPOINT

    @pytest.mark.asyncio
    async def test_backend_failure_envelope(self, api_config, api_paths):
        transport = routing_transport(
            {
                api_paths["outbound"]: httpx.Response(200, json=envelope(None, success=False, message="PI not found")),
                api_paths["inbound"]: httpx.Response(200, json=envelope([])),
            }
        )
        collector = AsyncDependencyCollector(api_config=api_config, transport=transport)

        with pytest.raises(FetchError, match="PI not found"):
            await collector.fetch_dependencies("Q99")

    @pytest.mark.asyncio
    async def test_non_json_body(self, api_config, api_paths):
        transport = routing_transport(
            {
                api_paths["outbound"]: httpx.Response(200, text="<html>login</html>"),
                api_paths["inbound"]: httpx.Response(200, json=envelope([])),
            }
        )
        collector = AsyncDependencyCollector(api_config=api_config, transport=transport)

        with pytest.raises(FetchError, match="non-JSON"):
            await collector.fetch_dependencies("Q32025")

    @pytest.mark.asyncio
    async def test_data_not_a_list(self, api_config, api_paths):
        transport = routing_transport(
            {
                api_paths["outbound"]: httpx.Response(200, json=envelope({"rows": []})),
                api_paths["inbound"]: httpx.Response(200, json=envelope([])),
            }
        )
        collector = AsyncDependencyCollector(api_config=api_config, transport=transport)

        with pytest.raises(FetchError, match="Expected a list"):
            await collector.fetch_dependencies("Q32025")

    @pytest.mark.asyncio
    async def test_transport_error_retried_then_raised(self, api_config, no_backoff):
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request.url.path)
            raise httpx.ConnectError("connection refused", request=request)

        collector = AsyncDependencyCollector(api_config=api_config, transport=httpx.MockTransport(handler))

        with pytest.raises(FetchError, match="connection refused"):
            await collector.fetch_dependencies("Q32025")

        # Three attempts per endpoint
        assert len(attempts) == 6

    @pytest.mark.asyncio
    async def test_transient_transport_error_recovers(self, api_config, api_paths, no_backoff):
        failures = {"count": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == api_paths["outbound"] and failures["count"] == 0:
                failures["count"] += 1
                raise httpx.ReadTimeout("slow", request=request)
            return httpx.Response(200, json=envelope([]))

        collector = AsyncDependencyCollector(api_config=api_config, transport=httpx.MockTransport(handler))

        snapshot = await collector.fetch_dependencies("Q32025")

        assert snapshot.is_empty
        no_backoff.assert_awaited_once()


class TestFetchAvailablePis:
    """Test fetch_available_pis()"""

    @pytest.mark.asyncio
    async def test_extracts_pi_names(self, api_config, api_paths):
        body = envelope({"pis": [{"pi_name": "Q32025"}, {"pi_name": "Q42025"}, {"pi_name": None}, {}]})
        transport = routing_transport({api_paths["pis"]: httpx.Response(200, json=body)})
        collector = AsyncDependencyCollector(api_config=api_config, transport=transport)

        assert await collector.fetch_available_pis() == ["Q32025", "Q42025"]

    @pytest.mark.asyncio
    async def test_unexpected_shape(self, api_config, api_paths):
        transport = routing_transport({api_paths["pis"]: httpx.Response(200, json=envelope({"items": 3}))})
        collector = AsyncDependencyCollector(api_config=api_config, transport=transport)

        with pytest.raises(FetchError):
            await collector.fetch_available_pis()


class TestUnwrapEnvelope:
    """Test unwrap_envelope()"""

    def test_envelope(self):
        assert unwrap_envelope(envelope([1, 2]), "/x") == [1, 2]

    def test_bare_list(self):
        assert unwrap_envelope([1], "/x") == [1]

    def test_missing_data(self):
        with pytest.raises(FetchError):
            unwrap_envelope({"success": True}, "/x")

    def test_scalar_body(self):
        with pytest.raises(FetchError):
            unwrap_envelope("nope", "/x")

    def test_failure_without_message(self):
        with pytest.raises(FetchError, match="backend reported failure"):
            unwrap_envelope({"success": False}, "/x")
