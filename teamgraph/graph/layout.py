"""
Layout Engine

Two pure strategies mapping (nodes, edges) to positioned nodes:

    Hierarchical - Sugiyama-style layered placement:
        1. Cycle breaking: ignore one closing back-edge per cycle (ranking only)
        2. Longest-path ranking: rank(v) = max(rank(u) + 1) over kept edges u -> v
        3. In-rank ordering: discovery order, then one barycenter sweep
        4. Coordinates: label-width-aware horizontal packing, fixed rank spacing

    Circular - uniform angular placement in discovery order, node 0 at the top.

Coordinates are node centers. Inputs are never mutated; the networkx graph used
for ranking is private to each call.
"""

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import networkx as nx

from teamgraph.domain.constants import LayoutConfig, layout_defaults
from teamgraph.domain.dependency import Edge, Graph, LayoutMode, Node, PositionedNode

EdgeKey = tuple[str, str]
LayoutStrategy = Callable[[Sequence[Node], Sequence[Edge], LayoutConfig], list[PositionedNode]]


@dataclass(frozen=True)
class RankAssignment:
    """
    Result of hierarchical ranking.

    Attributes:
        ranks: Node id -> rank (0 is the top row)
        ignored_edges: Back-edges skipped to break cycles; still drawn by the renderer
    """

    ranks: dict[str, int] = field(default_factory=dict)
    ignored_edges: frozenset[EdgeKey] = frozenset()

    @property
    def rank_count(self) -> int:
        return (max(self.ranks.values()) + 1) if self.ranks else 0


def _ranking_graph(node_ids: Sequence[str], edges: Sequence[Edge]) -> tuple[nx.DiGraph, set[EdgeKey]]:
    """Private DiGraph of the edge set with cycles broken."""
    known = set(node_ids)
    graph = nx.DiGraph()
    graph.add_nodes_from(node_ids)
    graph.add_edges_from(
        (edge.source, edge.target)
        for edge in edges
        if edge.source in known and edge.target in known and edge.source != edge.target
    )

    ignored: set[EdgeKey] = set()
    while True:
        try:
            cycle = nx.find_cycle(graph)
        except nx.NetworkXNoCycle:
            break
        # The last edge of a reported cycle closes it back to the start
        back_edge = (cycle[-1][0], cycle[-1][1])
        graph.remove_edge(*back_edge)
        ignored.add(back_edge)

    return graph, ignored


def assign_ranks(nodes: Sequence[Node], edges: Sequence[Edge]) -> RankAssignment:
    """
    Longest-path ranks respecting edge direction.

    For every edge (u, v) not in ignored_edges, rank(v) >= rank(u) + 1.
    """
    node_ids = list(dict.fromkeys(node.id for node in nodes))
    dag, ignored = _ranking_graph(node_ids, edges)

    discovery_index = {node_id: index for index, node_id in enumerate(node_ids)}
    ranks = {node_id: 0 for node_id in node_ids}
    for node_id in nx.lexicographical_topological_sort(dag, key=discovery_index.__getitem__):
        for successor in dag.successors(node_id):
            ranks[successor] = max(ranks[successor], ranks[node_id] + 1)

    return RankAssignment(ranks=ranks, ignored_edges=frozenset(ignored))


def order_within_ranks(node_ids: Sequence[str], edges: Sequence[Edge], assignment: RankAssignment) -> list[list[str]]:
    """
    Node ids grouped per rank.

    Each rank starts in discovery order; ranks below the first are then
    stably sorted by the mean position of their predecessors in the rank
    directly above. Nodes without such predecessors keep their position.
    """
    rows: list[list[str]] = [[] for _ in range(assignment.rank_count)]
    for node_id in node_ids:
        rows[assignment.ranks[node_id]].append(node_id)

    predecessors: dict[str, list[str]] = {node_id: [] for node_id in node_ids}
    for edge in edges:
        if edge.key in assignment.ignored_edges or edge.target not in predecessors or edge.source not in predecessors:
            continue
        predecessors[edge.target].append(edge.source)

    for rank in range(1, len(rows)):
        above = {node_id: float(position) for position, node_id in enumerate(rows[rank - 1])}
        current = {node_id: float(position) for position, node_id in enumerate(rows[rank])}

        def barycenter(node_id: str, above=above, current=current) -> float:
            positions = [above[p] for p in predecessors[node_id] if p in above]
            if not positions:
                return current[node_id]
            return sum(positions) / len(positions)

        rows[rank] = sorted(rows[rank], key=barycenter)

    return rows


def hierarchical_layout(
    nodes: Sequence[Node], edges: Sequence[Edge], settings: LayoutConfig = layout_defaults
) -> list[PositionedNode]:
    """
    Layered placement: one row per rank, rows centered on settings.CENTER_X.

    Returns:
        Positioned nodes in input order
    """
    unique_nodes = list({node.id: node for node in nodes}.values())
    if not unique_nodes:
        return []

    assignment = assign_ranks(unique_nodes, edges)
    rows = order_within_ranks([node.id for node in unique_nodes], edges, assignment)

    coordinates: dict[str, tuple[float, float]] = {}
    for rank, row in enumerate(rows):
        widths = [settings.node_width(node_id) for node_id in row]
        row_width = sum(widths) + settings.NODE_GAP * (len(row) - 1)
        left = settings.CENTER_X - row_width / 2
        y = settings.TOP_MARGIN + rank * settings.RANK_SPACING
        for node_id, width in zip(row, widths):
            coordinates[node_id] = (left + width / 2, y)
            left += width + settings.NODE_GAP

    return [PositionedNode.place(node, *coordinates[node.id]) for node in unique_nodes]


def circular_layout(
    nodes: Sequence[Node], edges: Sequence[Edge] = (), settings: LayoutConfig = layout_defaults
) -> list[PositionedNode]:
    """
    Uniform placement on a circle; edges are ignored.

    angle_i = 2*pi*i/N - pi/2, so node 0 sits at the top. Repeated ids are
    placed once, at their first position.
    """
    unique_nodes = list({node.id: node for node in nodes}.values())
    if not unique_nodes:
        return []

    angle_step = 2 * math.pi / len(unique_nodes)
    positioned = []
    for index, node in enumerate(unique_nodes):
        angle = index * angle_step - math.pi / 2
        x = settings.CENTER_X + settings.RADIUS * math.cos(angle)
        y = settings.CENTER_Y + settings.RADIUS * math.sin(angle)
        positioned.append(PositionedNode.place(node, x, y))
    return positioned


LAYOUT_STRATEGIES: dict[LayoutMode, LayoutStrategy] = {
    LayoutMode.HIERARCHICAL: hierarchical_layout,
    LayoutMode.CIRCULAR: circular_layout,
}


def layout(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    mode: LayoutMode | str = LayoutMode.HIERARCHICAL,
    settings: LayoutConfig = layout_defaults,
) -> list[PositionedNode]:
    """
    Position nodes with the selected strategy.

    Raises:
        ValueError: If mode is not a known layout mode
    """
    strategy = LAYOUT_STRATEGIES[LayoutMode(mode)]
    return strategy(nodes, edges, settings)


def layout_graph(
    graph: Graph, mode: LayoutMode | str = LayoutMode.HIERARCHICAL, settings: LayoutConfig = layout_defaults
) -> list[PositionedNode]:
    return layout(graph.nodes, graph.edges, mode, settings)


def positions_by_id(positioned: Sequence[PositionedNode]) -> dict[str, tuple[float, float]]:
    """Map of node id to (x, y)."""
    return {node.id: (node.x, node.y) for node in positioned}
