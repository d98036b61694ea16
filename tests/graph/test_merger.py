"""
Tests for the Bidirectional Merger

Covers:
- One edge vs. two edges per team pair
- FORWARD / REVERSE tagging and ordering
- Heavier-direction selection and tie-breaking
- Stroke width clamping and edge colors
"""

import pytest

from teamgraph.domain.dependency import DependencyRecord, EdgeDirection, RecordKind, RenderableEdge
from teamgraph.graph.aggregator import aggregate
from teamgraph.graph.merger import is_bidirectional, merge, pair_key, stroke_width


class TestMerge:
    """Tests for merge()"""

    def test_both_directions_positive_yield_two_edges(self):
        edges = merge({("A", "B"): 5, ("B", "A"): 3})

        assert edges == [
            RenderableEdge("A", "B", 5, EdgeDirection.FORWARD),
            RenderableEdge("B", "A", 3, EdgeDirection.REVERSE),
        ]

    def test_outbound_and_inbound_opposite_directions_stay_distinct(self):
        edge_map = aggregate(
            [DependencyRecord("A", ("B",), 5, RecordKind.OUTBOUND)],
            [DependencyRecord("A", ("B",), 3, RecordKind.INBOUND)],
        )

        edges = merge(edge_map)

        assert [(e.source, e.target, e.weight) for e in edges] == [("A", "B", 5), ("B", "A", 3)]
        assert is_bidirectional(edges, "A", "B")

    def test_one_way_edge_is_forward(self):
        edges = merge({("A", "B"): 4})

        assert edges == [RenderableEdge("A", "B", 4, EdgeDirection.FORWARD)]

    def test_zero_reverse_keeps_heavier_direction(self):
        edges = merge({("A", "B"): 4, ("B", "A"): 0})

        assert edges == [RenderableEdge("A", "B", 4, EdgeDirection.FORWARD)]

    def test_heavier_later_direction_wins_when_first_is_zero(self):
        edges = merge({("A", "B"): 0, ("B", "A"): 2})

        assert edges == [RenderableEdge("B", "A", 2, EdgeDirection.FORWARD)]

    def test_tie_keeps_first_encountered(self):
        edges = merge({("B", "A"): 0, ("A", "B"): 0})

        assert edges == [RenderableEdge("B", "A", 0, EdgeDirection.FORWARD)]

    def test_each_pair_processed_once(self, bidirectional_records):
        edges = merge(aggregate(bidirectional_records, []))

        assert len(edges) == 2
        assert {e.direction for e in edges} == {EdgeDirection.FORWARD, EdgeDirection.REVERSE}

    def test_pairs_emitted_in_first_seen_order(self):
        edges = merge({("C", "D"): 1, ("A", "B"): 1, ("D", "C"): 2})

        assert [e.key for e in edges] == [("C", "D"), ("D", "C"), ("A", "B")]

    def test_self_pairs_ignored(self):
        assert merge({("A", "A"): 3}) == []

    def test_delimiter_names_are_separate_pairs(self):
        edges = merge({("A|||B", "C"): 1, ("A", "B|||C"): 2})

        assert len(edges) == 2

    def test_empty_map(self):
        assert merge({}) == []


class TestPairKey:
    """Tests for pair_key()"""

    def test_order_independent(self):
        assert pair_key("B", "A") == pair_key("A", "B") == ("A", "B")

    def test_structural_not_concatenated(self):
        assert pair_key("A->B", "C") != pair_key("A", "B->C")


class TestEdgeStyle:
    """Tests for stroke width and colors"""

    @pytest.mark.parametrize(
        "weight,expected",
        [(0, 3.0), (1, 3.5), (4, 5.0), (10, 8.0), (100, 8.0)],
    )
    def test_stroke_width_clamped(self, weight, expected):
        assert stroke_width(weight) == expected

    def test_colors_by_direction(self):
        forward = RenderableEdge("A", "B", 1, EdgeDirection.FORWARD)
        reverse = RenderableEdge("B", "A", 1, EdgeDirection.REVERSE)

        assert forward.color == "#3b82f6"
        assert reverse.color == "#ef4444"

    def test_label(self):
        assert RenderableEdge("A", "B", 7).label == "7 stories"
