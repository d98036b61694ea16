"""
Team dependency graph view model

Headless state holder for an interactive dependency graph view:

    IDLE --begin_request--> LOADING --complete--> READY
                                    --fail------> ERROR
    READY/ERROR --begin_request--> LOADING   (PI change or retry)

Every request gets a monotonically increasing token. Responses carrying any
token other than the latest are ignored, so the last request always wins.

Dragged node positions are view-local overrides: they never reach the graph
core and are discarded whenever a new graph becomes READY or the layout mode
changes.
"""

from enum import Enum
from typing import Any

from teamgraph.collectors.dependency_collector import AsyncDependencyCollector, DependencySnapshot
from teamgraph.core.logging_config import get_logger
from teamgraph.dashboards.renderer import to_render_payload
from teamgraph.domain.constants import LayoutConfig, layout_defaults
from teamgraph.domain.dependency import LayoutMode, PositionedNode, ZeroMagnitudePolicy
from teamgraph.graph.diagnostics import DiagnosticsHook, log_diagnostics
from teamgraph.graph.pipeline import DependencyGraphResult, build_team_dependency_graph, relayout
from teamgraph.utils.error_handling import FetchError, log_and_continue, log_and_return_default

logger = get_logger(__name__)


class ViewState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class GraphViewModel:
    """
    Fetch/layout state machine for one dependency graph view.

    Example:
        view = GraphViewModel()
        token = view.begin_request("Q32025")
        view.complete(token, snapshot)
        payload = view.render_payload()
    """

    def __init__(
        self,
        layout_mode: LayoutMode | str = LayoutMode.HIERARCHICAL,
        zero_magnitude_policy: ZeroMagnitudePolicy = ZeroMagnitudePolicy.FLOOR_AT_ONE,
        settings: LayoutConfig = layout_defaults,
        watch_teams: tuple[str, ...] = (),
        on_diagnostics: DiagnosticsHook | None = log_diagnostics,
    ):
        self.layout_mode = LayoutMode(layout_mode)
        self.zero_magnitude_policy = zero_magnitude_policy
        self.settings = settings
        self.watch_teams = watch_teams
        self.on_diagnostics = on_diagnostics

        self.state = ViewState.IDLE
        self.pi: str | None = None
        self.result: DependencyGraphResult | None = None
        self.available_pis: list[str] = []
        self.error: str | None = None
        self._latest_token = 0
        self._overrides: dict[str, tuple[float, float]] = {}

    @property
    def latest_token(self) -> int:
        return self._latest_token

    def begin_request(self, pi: str | None = None) -> int:
        """
        Start a fetch for a PI and return its token.

        Any previously issued token becomes stale.
        """
        self._latest_token += 1
        self.pi = pi
        self.state = ViewState.LOADING
        self.error = None
        return self._latest_token

    def _is_stale(self, token: int) -> bool:
        if token != self._latest_token:
            logger.debug(f"Ignoring stale response (token {token}, latest {self._latest_token})")
            return True
        return False

    def complete(self, token: int, snapshot: DependencySnapshot) -> bool:
        """
        Deliver fetched rows for a request.

        Returns:
            True if the snapshot was applied, False if the token was stale
        """
        if self._is_stale(token):
            return False

        self.result = build_team_dependency_graph(
            snapshot.outbound,
            snapshot.inbound,
            layout_mode=self.layout_mode,
            zero_magnitude_policy=self.zero_magnitude_policy,
            settings=self.settings,
            watch_teams=self.watch_teams,
            on_diagnostics=self.on_diagnostics,
        )
        self._overrides = {}
        self.error = None
        self.state = ViewState.READY
        return True

    def fail(self, token: int, error: Exception | str) -> bool:
        """
        Record a failed request.

        The previous graph is dropped; the view shows the error and offers a retry.

        Returns:
            True if the failure was applied, False if the token was stale
        """
        if self._is_stale(token):
            return False

        if isinstance(error, Exception):
            log_and_continue(logger, error, {"pi": self.pi, "token": token}, "Dependency fetch")

        self.result = None
        self._overrides = {}
        self.error = str(error) or "Failed to fetch team dependency data"
        self.state = ViewState.ERROR
        return True

    def set_layout_mode(self, mode: LayoutMode | str) -> None:
        """
        Switch layout strategy.

        Positions are recomputed only when a graph is READY; otherwise the mode
        is remembered for the next graph.
        """
        self.layout_mode = LayoutMode(mode)
        if self.state is ViewState.READY and self.result is not None:
            self.result = relayout(self.result, self.layout_mode, self.settings)
            self._overrides = {}

    def move_node(self, node_id: str, x: float, y: float) -> bool:
        """
        Record a view-local position for a dragged node.

        Returns:
            False if no graph is READY or the node is unknown
        """
        if self.state is not ViewState.READY or self.result is None:
            return False
        if self.result.graph.get_node(node_id) is None:
            return False
        self._overrides[node_id] = (x, y)
        return True

    @property
    def positioned(self) -> list[PositionedNode]:
        """Layout positions with view-local overrides applied"""
        if self.result is None:
            return []
        return [
            node.moved(*self._overrides[node.id]) if node.id in self._overrides else node
            for node in self.result.positioned
        ]

    def render_payload(self) -> dict[str, Any]:
        """Renderer payload for the current state (empty unless READY)"""
        if self.state is not ViewState.READY or self.result is None:
            return {"nodes": [], "edges": [], "positions": {}}
        return to_render_payload(self.result.graph, self.positioned)

    async def load(self, collector: AsyncDependencyCollector, pi: str | None = None) -> ViewState:
        """
        Fetch and apply a snapshot, ending in READY or ERROR.

        A load superseded by a newer request leaves the newer state untouched.
        """
        token = self.begin_request(pi)
        try:
            snapshot = await collector.fetch_dependencies(pi)
        except FetchError as e:
            self.fail(token, e)
        else:
            self.complete(token, snapshot)
        return self.state

    async def retry(self, collector: AsyncDependencyCollector) -> ViewState:
        """Repeat the last request for the current PI."""
        return await self.load(collector, self.pi)

    async def load_available_pis(self, collector: AsyncDependencyCollector) -> list[str]:
        """
        Refresh the PI picker options.

        A failure leaves the graph untouched and yields an empty list.
        """
        try:
            self.available_pis = await collector.fetch_available_pis()
        except FetchError as e:
            self.available_pis = log_and_return_default(logger, e, {"endpoint": "pis"}, [], "PI listing")
        return self.available_pis
