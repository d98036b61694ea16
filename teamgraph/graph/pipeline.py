"""
Dependency graph pipeline

Runs the full core for one pair of snapshot collections:

    raw records -> normalize -> aggregate -> merge -> build_graph -> layout

Pure apart from the diagnostics hook, which receives a GraphDiagnostics after
every build (default: one DEBUG log line).
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from teamgraph.domain.constants import LayoutConfig, layout_defaults
from teamgraph.domain.dependency import (
    DependencyRecord,
    Graph,
    LayoutMode,
    PositionedNode,
    RecordKind,
    ZeroMagnitudePolicy,
)
from teamgraph.graph.aggregator import aggregate
from teamgraph.graph.diagnostics import DiagnosticsHook, GraphDiagnostics, collect_diagnostics, log_diagnostics
from teamgraph.graph.layout import layout
from teamgraph.graph.merger import merge
from teamgraph.graph.model import build_graph
from teamgraph.graph.normalizer import normalize_records

RawRecords = Iterable[DependencyRecord | dict] | None


@dataclass(frozen=True)
class DependencyGraphResult:
    """
    Output of one pipeline run.

    Attributes:
        graph: Nodes in discovery order plus renderable edges
        positioned: Nodes placed by the selected layout strategy
        edge_weights: Aggregated (source, target) -> weight map before merging
        diagnostics: Counters for the run
    """

    graph: Graph
    positioned: tuple[PositionedNode, ...] = ()
    edge_weights: Mapping[tuple[str, str], int] = field(default_factory=dict)
    diagnostics: GraphDiagnostics = field(default_factory=GraphDiagnostics)

    @property
    def is_empty(self) -> bool:
        return self.graph.is_empty


def build_team_dependency_graph(
    outbound_records: RawRecords,
    inbound_records: RawRecords,
    layout_mode: LayoutMode | str = LayoutMode.HIERARCHICAL,
    zero_magnitude_policy: ZeroMagnitudePolicy = ZeroMagnitudePolicy.FLOOR_AT_ONE,
    settings: LayoutConfig = layout_defaults,
    watch_teams: Sequence[str] = (),
    on_diagnostics: DiagnosticsHook | None = log_diagnostics,
) -> DependencyGraphResult:
    """
    Build and lay out the team dependency graph.

    Args:
        outbound_records: Rows from the outbound ("teams I depend on") endpoint
        inbound_records: Rows from the inbound ("teams that depend on me") endpoint
        layout_mode: Layout strategy to apply
        zero_magnitude_policy: Treatment of zero-magnitude rows
        settings: Layout constants
        watch_teams: Teams whose edges are listed in the diagnostics
        on_diagnostics: Called with the run's diagnostics; None disables it

    Returns:
        DependencyGraphResult (an empty graph when no valid rows remain)

    Example:
        >>> result = build_team_dependency_graph(
        ...     [{"owned_team": "A", "relying_on_teams_array": ["B"], "number_of_dependent_issues": 5}],
        ...     [{"assignee_team": "A", "relying_teams_array": ["B"], "volume_of_work_relied_upon": 3}],
        ...     on_diagnostics=None,
        ... )
        >>> [(e.source, e.target, e.weight) for e in result.graph.edges]
        [('A', 'B', 5), ('B', 'A', 3)]
    """
    outbound_raw = list(outbound_records or [])
    inbound_raw = list(inbound_records or [])

    outbound = normalize_records(outbound_raw, RecordKind.OUTBOUND)
    inbound = normalize_records(inbound_raw, RecordKind.INBOUND)

    edge_weights = aggregate(outbound, inbound, zero_magnitude_policy)
    graph = build_graph(merge(edge_weights), inbound)
    positioned = tuple(layout(graph.nodes, graph.edges, layout_mode, settings))

    diagnostics = collect_diagnostics(
        graph,
        received=(len(outbound_raw), len(inbound_raw)),
        kept=(len(outbound), len(inbound)),
        watch_teams=watch_teams,
    )
    if on_diagnostics is not None:
        on_diagnostics(diagnostics)

    return DependencyGraphResult(
        graph=graph, positioned=positioned, edge_weights=edge_weights, diagnostics=diagnostics
    )


def relayout(
    result: DependencyGraphResult, layout_mode: LayoutMode | str, settings: LayoutConfig = layout_defaults
) -> DependencyGraphResult:
    """Same graph, positions recomputed with another strategy."""
    positioned = tuple(layout(result.graph.nodes, result.graph.edges, layout_mode, settings))
    return DependencyGraphResult(
        graph=result.graph, positioned=positioned, edge_weights=result.edge_weights, diagnostics=result.diagnostics
    )
