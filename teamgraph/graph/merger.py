"""
Bidirectional Merger

Deduplicates the aggregated edge map by unordered team pair and decides how
each pair is drawn:
    - both directions with positive weight -> two edges, FORWARD and REVERSE
    - otherwise -> the single heavier direction, FORWARD
"""

from collections.abc import Mapping

from teamgraph.domain.constants import edge_style
from teamgraph.domain.dependency import EdgeDirection, RenderableEdge

EdgeKey = tuple[str, str]


def stroke_width(weight: float) -> float:
    """
    Line thickness for an edge weight: clamp(base + weight * scale, min, max).

    Example:
        >>> stroke_width(0)
        3.0
        >>> stroke_width(20)
        8.0
    """
    return edge_style.stroke_width(weight)


def pair_key(team_a: str, team_b: str) -> tuple[str, str]:
    """
    Order-independent key for a team pair.

    Structural (tuple) rather than a joined string, so team names containing
    separators such as "->" or "|||" cannot collide.

    Example:
        >>> pair_key("TeamB", "TeamA") == pair_key("TeamA", "TeamB")
        True
    """
    return (team_a, team_b) if team_a <= team_b else (team_b, team_a)


def merge(edge_map: Mapping[EdgeKey, int]) -> list[RenderableEdge]:
    """
    Turn an aggregated edge map into renderable edges.

    Pairs are emitted in the order their first direction appears in edge_map.

    Args:
        edge_map: (source, target) -> weight, as returned by aggregate()

    Returns:
        Renderable edges, one or two per unordered pair
    """
    processed: set[tuple[str, str]] = set()
    edges: list[RenderableEdge] = []

    for (source, target), weight in edge_map.items():
        if source == target:
            continue

        key = pair_key(source, target)
        if key in processed:
            continue
        processed.add(key)

        reverse_weight = edge_map.get((target, source))

        if reverse_weight is not None and weight > 0 and reverse_weight > 0:
            edges.append(RenderableEdge(source, target, weight, EdgeDirection.FORWARD))
            edges.append(RenderableEdge(target, source, reverse_weight, EdgeDirection.REVERSE))
        elif reverse_weight is not None and reverse_weight > weight:
            edges.append(RenderableEdge(target, source, reverse_weight, EdgeDirection.FORWARD))
        else:
            edges.append(RenderableEdge(source, target, weight, EdgeDirection.FORWARD))

    return edges


def is_bidirectional(edges: list[RenderableEdge], team_a: str, team_b: str) -> bool:
    """True when both directions between the two teams are present in edges."""
    keys = {edge.key for edge in edges}
    return (team_a, team_b) in keys and (team_b, team_a) in keys
