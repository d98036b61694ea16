"""
Domain Models - Type-safe data structures for the team dependency graph

Usage:
    from teamgraph.domain import DependencyRecord, RecordKind

    record = DependencyRecord("TeamA", ("TeamB",), 3, RecordKind.OUTBOUND)
"""

from .constants import LayoutConfig, edge_style, graph_model, layout_defaults
from .dependency import (
    DependencyRecord,
    Edge,
    EdgeDirection,
    Graph,
    LayoutMode,
    Node,
    PerspectiveWeights,
    PositionedNode,
    RecordKind,
    RenderableEdge,
    ZeroMagnitudePolicy,
)

__all__ = [
    # Records
    "DependencyRecord",
    "RecordKind",
    "ZeroMagnitudePolicy",
    "PerspectiveWeights",
    # Graph
    "Edge",
    "RenderableEdge",
    "EdgeDirection",
    "Node",
    "PositionedNode",
    "Graph",
    "LayoutMode",
    # Constants
    "LayoutConfig",
    "edge_style",
    "layout_defaults",
    "graph_model",
]
