"""
Template Rendering Utilities

Turns a positioned dependency graph into:
    - a JSON-ready render payload (nodes, edges, positions) for any diagram renderer
    - a self-contained SVG/HTML dashboard rendered through Jinja2

Usage:
    from teamgraph.dashboards.renderer import render_dependency_graph_html, to_render_payload

    payload = to_render_payload(result.graph, result.positioned)
    html = render_dependency_graph_html(payload, {"pi": "Q32025"})
"""

import math
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from teamgraph.core.logging_config import get_logger
from teamgraph.domain.constants import LayoutConfig, edge_style, layout_defaults
from teamgraph.domain.dependency import EdgeDirection, Graph, PositionedNode

logger = get_logger(__name__)

DEPENDENCY_GRAPH_TEMPLATE = "team_dependency_graph.html"
NODE_HEIGHT = 44.0
CANVAS_MARGIN = 80.0
PAIR_OFFSET = 6.0
"""Perpendicular shift applied to the REVERSE edge of a bidirectional pair"""

# Initialize Jinja2 environment (singleton)
_jinja_env: Environment | None = None


def to_render_payload(graph: Graph, positioned: Sequence[PositionedNode]) -> dict[str, Any]:
    """
    Build the renderer-facing payload.

    Args:
        graph: Graph from the pipeline
        positioned: Output of the layout engine for the same graph

    Returns:
        {"nodes": [...], "edges": [...], "positions": {id: {"x", "y"}}}

    Example:
        >>> payload = to_render_payload(Graph(), [])
        >>> payload["nodes"], payload["edges"], payload["positions"]
        ([], [], {})
    """
    nodes = [
        {
            "id": node.id,
            "inboundWeight": node.inbound_weight,
            "highlighted": node.highlighted,
            "x": node.x,
            "y": node.y,
        }
        for node in positioned
    ]
    edges = [
        {
            "source": edge.source,
            "target": edge.target,
            "weight": edge.weight,
            "direction": edge.direction.value,
            "strokeWidth": edge.stroke_width,
            "color": edge.color,
            "label": edge.label,
        }
        for edge in graph.edges
    ]
    positions = {node.id: {"x": node.x, "y": node.y} for node in positioned}
    return {"nodes": nodes, "edges": edges, "positions": positions}


def _edge_geometry(edge: dict[str, Any], positions: dict[str, dict[str, float]]) -> dict[str, Any] | None:
    start = positions.get(edge["source"])
    end = positions.get(edge["target"])
    if start is None or end is None:
        return None

    x1, y1, x2, y2 = start["x"], start["y"], end["x"], end["y"]
    length = math.hypot(x2 - x1, y2 - y1) or 1.0

    # Only the REVERSE edge of a pair moves; the forward edge stays on the center line
    offset = PAIR_OFFSET if edge["direction"] == EdgeDirection.REVERSE.value else 0.0
    dx, dy = -(y2 - y1) / length * offset, (x2 - x1) / length * offset

    return {
        **edge,
        "x1": x1 + dx,
        "y1": y1 + dy,
        "x2": x2 + dx,
        "y2": y2 + dy,
        "label_x": (x1 + x2) / 2 + dx * 2,
        "label_y": (y1 + y2) / 2 + dy * 2,
        "label_color": "#991b1b" if edge["direction"] == EdgeDirection.REVERSE.value else "#1e40af",
    }


def build_svg_context(payload: dict[str, Any], settings: LayoutConfig = layout_defaults) -> dict[str, Any]:
    """
    Precompute SVG geometry for the dashboard template.

    Returns:
        Template context with svg_nodes, svg_edges and the canvas view box
    """
    svg_nodes = []
    for node in payload["nodes"]:
        width = settings.node_width(node["id"])
        svg_nodes.append(
            {
                **node,
                "width": width,
                "height": NODE_HEIGHT,
                "left": node["x"] - width / 2,
                "top": node["y"] - NODE_HEIGHT / 2,
                "border_color": edge_style.HIGHLIGHT_COLOR if node["highlighted"] else edge_style.NODE_BORDER_COLOR,
            }
        )

    svg_edges = [geometry for edge in payload["edges"] if (geometry := _edge_geometry(edge, payload["positions"]))]

    if svg_nodes:
        min_x = min(n["left"] for n in svg_nodes) - CANVAS_MARGIN
        min_y = min(n["top"] for n in svg_nodes) - CANVAS_MARGIN
        max_x = max(n["left"] + n["width"] for n in svg_nodes) + CANVAS_MARGIN
        max_y = max(n["top"] + n["height"] for n in svg_nodes) + CANVAS_MARGIN
    else:
        min_x, min_y, max_x, max_y = 0.0, 0.0, settings.CENTER_X * 2, settings.CENTER_Y * 2

    return {
        "svg_nodes": svg_nodes,
        "svg_edges": svg_edges,
        "view_box": f"{min_x:.1f} {min_y:.1f} {max_x - min_x:.1f} {max_y - min_y:.1f}",
        "forward_color": edge_style.FORWARD_COLOR,
        "reverse_color": edge_style.REVERSE_COLOR,
        "highlight_color": edge_style.HIGHLIGHT_COLOR,
    }


def get_jinja_environment() -> Environment:
    """
    Get or create the Jinja2 environment (singleton pattern).

    Auto-escaping is enabled for HTML/XML, so team names are always escaped.
    """
    global _jinja_env

    if _jinja_env is None:
        template_dir = Path(__file__).parent.parent / "templates"

        _jinja_env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

        _jinja_env.filters["format_number"] = format_number
        _jinja_env.filters["format_coord"] = format_coord

    return _jinja_env


def render_dashboard(template_name: str, context: dict[str, Any], inject_defaults: bool = True) -> str:
    """
    Render a dashboard template with context data.

    :param template_name: Template file name relative to the templates/ directory
    :param context: Dictionary of template variables
    :param inject_defaults: Whether to inject default variables like generation_date (default: True)
    :returns: Rendered HTML string
    :raises jinja2.TemplateNotFound: If template file doesn't exist
    """
    env = get_jinja_environment()
    template = env.get_template(template_name)

    if inject_defaults:
        defaults = {"generation_date": datetime.now().strftime("%Y-%m-%d %H:%M:%S")}
        final_context = {**defaults, **context}
    else:
        final_context = context

    rendered: str = template.render(**final_context)
    return rendered


def render_dependency_graph_html(
    payload: dict[str, Any], context: dict[str, Any] | None = None, settings: LayoutConfig = layout_defaults
) -> str:
    """
    Render the team dependency dashboard.

    :param payload: Output of to_render_payload()
    :param context: Extra template variables (pi, layout_mode, title, ...)
    :returns: Self-contained HTML; an empty graph renders the empty state
    """
    full_context = {
        "title": "Team Dependency Graph",
        "node_count": len(payload["nodes"]),
        "edge_count": len(payload["edges"]),
        **build_svg_context(payload, settings),
        **(context or {}),
    }
    html = render_dashboard(DEPENDENCY_GRAPH_TEMPLATE, full_context)
    logger.debug(f"Rendered dependency graph dashboard ({len(html)} bytes)")
    return html


# Custom Jinja2 filters


def format_number(value: Any, decimals: int = 0) -> str:
    """
    Format number with thousand separators (Jinja2 filter).

    Example:
        >>> format_number(1234.56)
        '1,235'
    """
    try:
        num = float(value)
        if decimals == 0:
            return f"{round(num):,}"
        return f"{num:,.{decimals}f}"
    except (ValueError, TypeError):
        return str(value)


def format_coord(value: Any) -> str:
    """SVG coordinate with one decimal (Jinja2 filter)."""
    try:
        return f"{float(value):.1f}"
    except (ValueError, TypeError):
        return "0.0"
