"""
Graph Model

Derives the node set and per-team metrics from merged edges.
"""

from collections.abc import Iterable, Sequence

from teamgraph.domain.constants import graph_model
from teamgraph.domain.dependency import DependencyRecord, Graph, Node, RecordKind, RenderableEdge
from teamgraph.graph.normalizer import normalize_records


def discover_teams(edges: Sequence[RenderableEdge]) -> list[str]:
    """
    Distinct team names touched by edges, in discovery order.

    Discovery order is every edge source (in edge order) followed by every
    edge target; the first occurrence of a name fixes its position.
    """
    ordered = [edge.source for edge in edges] + [edge.target for edge in edges]
    return list(dict.fromkeys(ordered))


def inbound_weights(inbound_records: Iterable[DependencyRecord | dict] | None) -> dict[str, int]:
    """Sum of inbound magnitude per depended-upon team."""
    totals: dict[str, int] = {}
    for record in normalize_records(inbound_records, RecordKind.INBOUND):
        totals[record.owner_team] = totals.get(record.owner_team, 0) + record.magnitude
    return totals


def rank_by_inbound_weight(team_ids: Sequence[str], weights: dict[str, int]) -> list[str]:
    """Teams ordered by descending inbound weight; ties keep discovery order."""
    return sorted(team_ids, key=lambda team: -weights.get(team, 0))


def build_graph(
    renderable_edges: Sequence[RenderableEdge],
    inbound_records: Iterable[DependencyRecord | dict] | None = None,
    highlight_count: int = graph_model.HIGHLIGHT_COUNT,
) -> Graph:
    """
    Build the team graph.

    Args:
        renderable_edges: Output of merge()
        inbound_records: Inbound records used for per-team inbound weight
        highlight_count: How many teams to highlight (default: 3)

    Returns:
        Graph with nodes in discovery order

    Example:
        >>> edges = [RenderableEdge("A", "B", 2)]
        >>> graph = build_graph(edges, [DependencyRecord("B", ("A",), 5, RecordKind.INBOUND)])
        >>> [(n.id, n.inbound_weight, n.highlighted) for n in graph.nodes]
        [('A', 0, True), ('B', 5, True)]
    """
    team_ids = discover_teams(renderable_edges)
    weights = inbound_weights(inbound_records)
    highlighted = set(rank_by_inbound_weight(team_ids, weights)[:highlight_count])

    nodes = tuple(
        Node(id=team, inbound_weight=weights.get(team, 0), highlighted=team in highlighted) for team in team_ids
    )
    return Graph(nodes=nodes, edges=tuple(renderable_edges))


def top_nodes(graph: Graph, k: int = graph_model.HIGHLIGHT_COUNT) -> list[Node]:
    """The k nodes with the largest inbound weight (ties by discovery order)."""
    return sorted(graph.nodes, key=lambda node: -node.inbound_weight)[:k]
