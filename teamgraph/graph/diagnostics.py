"""
Graph build diagnostics

Summarizes one pipeline run (records received vs. kept, graph size,
bidirectional pairs, and the edges touching any watched team) so a build can be
inspected without a debugger.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from teamgraph.core.logging_config import get_logger, log_with_context
from teamgraph.domain.dependency import EdgeDirection, Graph

logger = get_logger(__name__)


@dataclass(frozen=True)
class GraphDiagnostics:
    """
    Counters and watch-list details for one graph build.

    Attributes:
        outbound_received / outbound_kept: Outbound rows before and after normalization
        inbound_received / inbound_kept: Inbound rows before and after normalization
        team_count: Nodes in the graph
        edge_count: Renderable edges in the graph
        bidirectional_pairs: Team pairs drawn as two edges
        watched_edges: Watched team -> labels of the edges touching it
    """

    outbound_received: int = 0
    outbound_kept: int = 0
    inbound_received: int = 0
    inbound_kept: int = 0
    team_count: int = 0
    edge_count: int = 0
    bidirectional_pairs: int = 0
    watched_edges: dict[str, list[str]] = field(default_factory=dict)

    @property
    def dropped_records(self) -> int:
        return (self.outbound_received - self.outbound_kept) + (self.inbound_received - self.inbound_kept)

    def to_dict(self) -> dict:
        return {
            "outbound_received": self.outbound_received,
            "outbound_kept": self.outbound_kept,
            "inbound_received": self.inbound_received,
            "inbound_kept": self.inbound_kept,
            "dropped_records": self.dropped_records,
            "team_count": self.team_count,
            "edge_count": self.edge_count,
            "bidirectional_pairs": self.bidirectional_pairs,
            "watched_edges": self.watched_edges,
        }


DiagnosticsHook = Callable[[GraphDiagnostics], None]


def collect_diagnostics(
    graph: Graph,
    received: tuple[int, int],
    kept: tuple[int, int],
    watch_teams: Sequence[str] = (),
) -> GraphDiagnostics:
    """
    Build diagnostics for a finished graph.

    Args:
        graph: Graph produced by the pipeline
        received: (outbound, inbound) raw row counts
        kept: (outbound, inbound) normalized row counts
        watch_teams: Team names whose edges should be listed

    Returns:
        GraphDiagnostics
    """
    watched: dict[str, list[str]] = {}
    for team in watch_teams:
        watched[team] = [
            f"{edge.source} -> {edge.target} ({edge.label}, {edge.direction.value})"
            for edge in graph.edges
            if team in (edge.source, edge.target)
        ]

    return GraphDiagnostics(
        outbound_received=received[0],
        outbound_kept=kept[0],
        inbound_received=received[1],
        inbound_kept=kept[1],
        team_count=len(graph.nodes),
        edge_count=len(graph.edges),
        bidirectional_pairs=sum(1 for edge in graph.edges if edge.direction is EdgeDirection.REVERSE),
        watched_edges=watched,
    )


def log_diagnostics(diagnostics: GraphDiagnostics) -> None:
    """Default hook: one structured DEBUG line per build."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    log_with_context(logger, "debug", "Dependency graph built", **diagnostics.to_dict())
