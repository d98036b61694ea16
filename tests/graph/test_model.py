"""
Tests for the Graph Model

Covers:
- Node discovery order (all sources, then all targets)
- Inbound weight per team and top-3 highlighting
- Node-set completeness and idempotence of the full core
"""

import pytest

from teamgraph.domain.dependency import DependencyRecord, EdgeDirection, Graph, RecordKind, RenderableEdge
from teamgraph.graph.aggregator import aggregate
from teamgraph.graph.merger import merge
from teamgraph.graph.model import build_graph, discover_teams, inbound_weights, top_nodes
from teamgraph.graph.normalizer import normalize_records


def edge(source, target, weight=1, direction=EdgeDirection.FORWARD):
    return RenderableEdge(source, target, weight, direction)


class TestDiscoverTeams:
    """Tests for discover_teams()"""

    def test_sources_first_then_targets(self):
        edges = [edge("B", "C"), edge("A", "B"), edge("D", "A")]

        assert discover_teams(edges) == ["B", "A", "D", "C"]

    def test_no_duplicates(self):
        edges = [edge("A", "B"), edge("B", "A", direction=EdgeDirection.REVERSE)]

        assert discover_teams(edges) == ["A", "B"]

    def test_empty(self):
        assert discover_teams([]) == []


class TestInboundWeights:
    """Tests for inbound_weights()"""

    def test_sums_per_owner(self):
        records = [
            DependencyRecord("B", ("A",), 5, RecordKind.INBOUND),
            DependencyRecord("B", ("C",), 2, RecordKind.INBOUND),
            DependencyRecord("C", ("A",), 1, RecordKind.INBOUND),
        ]

        assert inbound_weights(records) == {"B": 7, "C": 1}

    def test_accepts_raw_rows(self, inbound_rows):
        assert inbound_weights(inbound_rows) == {"Ledger": 8, "Identity": 1}

    def test_none(self):
        assert inbound_weights(None) == {}


class TestBuildGraph:
    """Tests for build_graph()"""

    def test_no_inbound_records_highlights_first_three_discovered(self):
        graph = build_graph([edge("A", "B"), edge("B", "C")])

        assert [node.inbound_weight for node in graph.nodes] == [0, 0, 0]
        assert graph.highlighted_ids == {"A", "B", "C"}

    def test_ties_broken_by_discovery_order(self):
        graph = build_graph([edge("A", "B"), edge("C", "D"), edge("E", "F")])

        assert graph.node_ids == ["A", "C", "E", "B", "D", "F"]
        assert graph.highlighted_ids == {"A", "C", "E"}

    def test_top_three_by_inbound_weight(self):
        edges = [edge("A", "B"), edge("C", "D"), edge("E", "F")]
        inbound = [
            DependencyRecord("F", ("E",), 9, RecordKind.INBOUND),
            DependencyRecord("D", ("C",), 4, RecordKind.INBOUND),
            DependencyRecord("B", ("A",), 4, RecordKind.INBOUND),
            DependencyRecord("A", ("B",), 1, RecordKind.INBOUND),
        ]

        graph = build_graph(edges, inbound)

        assert graph.highlighted_ids == {"F", "D", "B"}
        assert [node.id for node in top_nodes(graph)] == ["F", "B", "D"]

    def test_fewer_than_three_nodes_all_highlighted(self):
        graph = build_graph([edge("A", "B")])

        assert graph.highlighted_ids == {"A", "B"}

    def test_inbound_weight_for_team_without_edges_is_ignored(self):
        graph = build_graph([edge("A", "B")], [DependencyRecord("Z", ("Y",), 50, RecordKind.INBOUND)])

        assert graph.node_ids == ["A", "B"]
        assert graph.highlighted_ids == {"A", "B"}

    def test_empty_graph(self):
        graph = build_graph([])

        assert graph.is_empty
        assert graph.edges == ()

    def test_node_set_equals_edge_endpoints(self, outbound_rows, inbound_rows):
        outbound = normalize_records(outbound_rows, RecordKind.OUTBOUND)
        inbound = normalize_records(inbound_rows, RecordKind.INBOUND)
        edges = merge(aggregate(outbound, inbound))

        graph = build_graph(edges, inbound)

        endpoints = {e.source for e in graph.edges} | {e.target for e in graph.edges}
        assert set(graph.node_ids) == endpoints
        assert len(graph.node_ids) == len(set(graph.node_ids))

    def test_idempotent(self, outbound_rows, inbound_rows):
        def run():
            outbound = normalize_records(outbound_rows, RecordKind.OUTBOUND)
            inbound = normalize_records(inbound_rows, RecordKind.INBOUND)
            return build_graph(merge(aggregate(outbound, inbound)), inbound)

        assert run() == run()


class TestGraphInvariants:
    """Graph validation"""

    def test_edge_to_unknown_node_rejected(self):
        with pytest.raises(ValueError):
            Graph(nodes=(), edges=(edge("A", "B"),))

    def test_self_loop_rejected(self):
        with pytest.raises(ValueError):
            RenderableEdge("A", "A", 1)

    def test_negative_weight_rejected(self):
        with pytest.raises(ValueError):
            RenderableEdge("A", "B", -1)
