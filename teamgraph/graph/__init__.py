"""
Team dependency graph core

Pure pipeline stages: normalizer, aggregator, bidirectional merger, graph model
and layout engine. Nothing in this package performs I/O.
"""

from teamgraph.graph.aggregator import aggregate, aggregate_by_perspective
from teamgraph.graph.diagnostics import GraphDiagnostics, log_diagnostics
from teamgraph.graph.layout import assign_ranks, circular_layout, hierarchical_layout, layout, positions_by_id
from teamgraph.graph.merger import merge, pair_key, stroke_width
from teamgraph.graph.model import build_graph, top_nodes
from teamgraph.graph.normalizer import normalize_records
from teamgraph.graph.pipeline import DependencyGraphResult, build_team_dependency_graph, relayout

__all__ = [
    "aggregate",
    "aggregate_by_perspective",
    "assign_ranks",
    "build_graph",
    "build_team_dependency_graph",
    "circular_layout",
    "DependencyGraphResult",
    "GraphDiagnostics",
    "hierarchical_layout",
    "layout",
    "log_diagnostics",
    "merge",
    "normalize_records",
    "pair_key",
    "positions_by_id",
    "relayout",
    "stroke_width",
    "top_nodes",
]
