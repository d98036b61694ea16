"""
Team dependency domain models

Represents the data flowing through the dependency graph pipeline:
    - DependencyRecord: One epic-level snapshot row (outbound or inbound perspective)
    - Edge / RenderableEdge: Weighted directed team-to-team relationships
    - Node / PositionedNode: Teams in the graph, optionally placed in 2D
    - Graph: Nodes plus renderable edges

All models are immutable; every pipeline stage returns new instances.
"""

from dataclasses import dataclass, field, replace
from enum import Enum

from teamgraph.domain.constants import edge_style


class RecordKind(str, Enum):
    """Perspective a DependencyRecord was captured from"""

    OUTBOUND = "outbound"  # owner depends on related teams
    INBOUND = "inbound"  # owner is depended upon by related teams


class EdgeDirection(str, Enum):
    """Styling intent of a renderable edge within its team pair"""

    FORWARD = "forward"
    REVERSE = "reverse"


class LayoutMode(str, Enum):
    """Available layout strategies"""

    HIERARCHICAL = "hierarchical"
    CIRCULAR = "circular"


class ZeroMagnitudePolicy(str, Enum):
    """
    How the aggregator treats records whose magnitude is zero.

    FLOOR_AT_ONE keeps the dashboard's historical behavior (weight 1 per related
    team); DROP makes zero-magnitude records contribute nothing.
    """

    FLOOR_AT_ONE = "floor_at_one"
    DROP = "drop"


# Backend field names per perspective: (owner, related teams, magnitude)
WIRE_FIELDS: dict[RecordKind, tuple[str, str, str]] = {
    RecordKind.OUTBOUND: ("owned_team", "relying_on_teams_array", "number_of_dependent_issues"),
    RecordKind.INBOUND: ("assignee_team", "relying_teams_array", "volume_of_work_relied_upon"),
}


def as_team_tuple(value: object) -> tuple:
    """
    Related-teams value as a tuple.

    A single string is one team; lists and tuples are kept; anything else is empty.
    """
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return ()


@dataclass(frozen=True)
class DependencyRecord:
    """
    A single dependency snapshot row.

    Attributes:
        owner_team: Team the row is about
        related_teams: Teams on the other side of the dependency (may hold None before normalization)
        magnitude: Count of dependent issues (outbound) or volume relied upon (inbound);
            raw rows may carry None or strings here until normalized
        kind: Perspective of the row

    Example:
        >>> record = DependencyRecord("TeamA", ("TeamB", "TeamC"), 4, RecordKind.OUTBOUND)
        >>> record.related_teams
        ('TeamB', 'TeamC')
    """

    owner_team: str | None
    related_teams: tuple[str | None, ...]
    magnitude: int
    kind: RecordKind = RecordKind.OUTBOUND

    @classmethod
    def from_api(cls, data: dict, kind: RecordKind) -> "DependencyRecord":
        """
        Build a record from a backend row without validating it.

        Validation is the normalizer's job; this only maps field names.

        Args:
            data: Row from the epic dependency endpoints
            kind: Which endpoint the row came from

        Returns:
            DependencyRecord with raw (possibly malformed) values
        """
        owner_field, related_field, magnitude_field = WIRE_FIELDS[kind]
        return cls(
            owner_team=data.get(owner_field),
            related_teams=as_team_tuple(data.get(related_field)),
            magnitude=data.get(magnitude_field),
            kind=kind,
        )


@dataclass(frozen=True)
class PerspectiveWeights:
    """Edge weight split by the perspective that contributed it"""

    outbound: int = 0
    inbound: int = 0

    @property
    def total(self) -> int:
        return self.outbound + self.inbound


@dataclass(frozen=True)
class Edge:
    """
    Weighted directed dependency between two teams.

    Raises:
        ValueError: If source equals target or weight is negative
    """

    source: str
    target: str
    weight: int

    def __post_init__(self) -> None:
        if self.source == self.target:
            raise ValueError(f"Self-loop edges are not allowed: {self.source}")
        if self.weight < 0:
            raise ValueError(f"Edge weight must be >= 0, got {self.weight}")

    @property
    def key(self) -> tuple[str, str]:
        return (self.source, self.target)


@dataclass(frozen=True)
class RenderableEdge(Edge):
    """
    Edge tagged with the styling intent the merger chose for it.

    Attributes:
        direction: FORWARD for the first-seen direction of a pair, REVERSE for its counterpart
    """

    direction: EdgeDirection = EdgeDirection.FORWARD

    @property
    def stroke_width(self) -> float:
        """Line thickness derived from weight, clamped to the configured range"""
        return edge_style.stroke_width(self.weight)

    @property
    def color(self) -> str:
        if self.direction is EdgeDirection.REVERSE:
            return edge_style.REVERSE_COLOR
        return edge_style.FORWARD_COLOR

    @property
    def label(self) -> str:
        return f"{self.weight} stories"


@dataclass(frozen=True)
class Node:
    """
    A team in the dependency graph.

    Attributes:
        id: Team name (unique within a graph)
        inbound_weight: Sum of inbound volume attributed to this team
        highlighted: True for the top teams by inbound_weight
    """

    id: str
    inbound_weight: int = 0
    highlighted: bool = False


@dataclass(frozen=True)
class PositionedNode(Node):
    """Node placed in 2D by a layout strategy"""

    x: float = 0.0
    y: float = 0.0

    @classmethod
    def place(cls, node: Node, x: float, y: float) -> "PositionedNode":
        return cls(id=node.id, inbound_weight=node.inbound_weight, highlighted=node.highlighted, x=x, y=y)

    def moved(self, x: float, y: float) -> "PositionedNode":
        return replace(self, x=x, y=y)


@dataclass(frozen=True)
class Graph:
    """
    Team dependency graph.

    Nodes are kept in discovery order; every edge endpoint is a node.

    Raises:
        ValueError: If an edge references a node that is not part of the graph
    """

    nodes: tuple[Node, ...] = field(default_factory=tuple)
    edges: tuple[RenderableEdge, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        node_ids = {node.id for node in self.nodes}
        if len(node_ids) != len(self.nodes):
            raise ValueError("Graph nodes must have unique ids")
        for edge in self.edges:
            if edge.source not in node_ids or edge.target not in node_ids:
                raise ValueError(f"Edge {edge.source} -> {edge.target} references an unknown node")

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    @property
    def node_ids(self) -> list[str]:
        return [node.id for node in self.nodes]

    def get_node(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    @property
    def highlighted_ids(self) -> set[str]:
        return {node.id for node in self.nodes if node.highlighted}
