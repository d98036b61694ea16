#!/usr/bin/env python3
"""
Graph Constants

Centralized styling and layout constants for the team dependency graph.
Provides immutable configuration values used by the merger, layout engine and dashboard.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class EdgeStyleConfig:
    """
    Edge styling constants.

    Stroke width grows linearly with weight and is clamped so heavy
    dependencies stay readable.

    Example:
        >>> edge_style.stroke_width(2)
        4.0
        >>> edge_style.stroke_width(100)
        8.0
    """

    BASE_WIDTH: float = 3.0
    """Stroke width before the weight contribution"""

    WIDTH_PER_WEIGHT: float = 0.5
    """Stroke width added per unit of edge weight"""

    MIN_WIDTH: float = 1.0
    MAX_WIDTH: float = 8.0

    FORWARD_COLOR: str = "#3b82f6"
    """Blue, one-way or first-seen direction"""

    REVERSE_COLOR: str = "#ef4444"
    """Red, counterpart of a bidirectional pair"""

    HIGHLIGHT_COLOR: str = "#f59e0b"
    NODE_BORDER_COLOR: str = "#3b82f6"

    def stroke_width(self, weight: float) -> float:
        width = self.BASE_WIDTH + weight * self.WIDTH_PER_WEIGHT
        return max(self.MIN_WIDTH, min(width, self.MAX_WIDTH))


@dataclass(frozen=True)
class LayoutConfig:
    """
    Layout constants shared by both strategies.

    Attributes:
        CENTER_X / CENTER_Y: Circle center for the circular layout, row center for hierarchical
        RADIUS: Circle radius for the circular layout
        RANK_SPACING: Vertical distance between hierarchical ranks
        TOP_MARGIN: Y coordinate of rank 0
        NODE_GAP: Horizontal gap between neighbouring nodes in a rank
        MIN_NODE_WIDTH: Lower bound for the estimated node width
        CHAR_WIDTH: Estimated pixel width of one label character
        LABEL_PADDING: Horizontal padding added to the label width
    """

    CENTER_X: float = 400.0
    CENTER_Y: float = 400.0
    RADIUS: float = 300.0
    RANK_SPACING: float = 150.0
    TOP_MARGIN: float = 50.0
    NODE_GAP: float = 40.0
    MIN_NODE_WIDTH: float = 120.0
    CHAR_WIDTH: float = 8.0
    LABEL_PADDING: float = 30.0

    def node_width(self, label: str) -> float:
        return max(self.MIN_NODE_WIDTH, len(label) * self.CHAR_WIDTH + self.LABEL_PADDING)


@dataclass(frozen=True)
class GraphModelConfig:
    """Graph model constants"""

    HIGHLIGHT_COUNT: int = 3
    """Number of teams emphasized by inbound weight"""


edge_style = EdgeStyleConfig()
layout_defaults = LayoutConfig()
graph_model = GraphModelConfig()
