"""
Dashboard Generation - Present the positioned dependency graph

This package contains:
    - renderer: Render payload and Jinja2 HTML dashboard
    - graph_view: Fetch/layout state machine for an interactive view

Usage:
    from teamgraph.dashboards.renderer import render_dependency_graph_html, to_render_payload

    html = render_dependency_graph_html(to_render_payload(graph, positioned), {"pi": "Q32025"})
"""

__all__ = []
