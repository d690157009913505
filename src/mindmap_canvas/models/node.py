"""Domain models for the mindmap."""

from dataclasses import dataclass

ROOT_ID = "root"


@dataclass(frozen=True)
class Node:
    """A single entry in the mindmap tree."""

    id: str
    title: str
    summary: str = ""
    description: str | None = None
    notes: str | None = None
    children: tuple["Node", ...] = ()


@dataclass(frozen=True)
class Offset:
    """A manual displacement applied on top of the computed layout position."""

    dx: float = 0.0
    dy: float = 0.0

    def __add__(self, other: "Offset") -> "Offset":
        return Offset(self.dx + other.dx, self.dy + other.dy)

    @property
    def is_zero(self) -> bool:
        return self.dx == 0 and self.dy == 0


ZERO_OFFSET = Offset()


@dataclass(frozen=True)
class PositionedNode:
    """A node annotated with world coordinates for one layout pass."""

    node: Node
    x: float
    y: float
    depth: int
    collapsed: bool = False

    @property
    def id(self) -> str:
        return self.node.id

    @property
    def title(self) -> str:
        return self.node.title

    @property
    def summary(self) -> str:
        return self.node.summary

    @property
    def description(self) -> str | None:
        return self.node.description

    @property
    def notes(self) -> str | None:
        return self.node.notes

    @property
    def children(self) -> tuple[Node, ...]:
        return self.node.children


@dataclass(frozen=True)
class Edge:
    """A connector from a parent to one of its visible children."""

    source: PositionedNode
    target: PositionedNode


@dataclass(frozen=True)
class LayoutResult:
    """Positioned nodes and edges for one layout pass."""

    nodes: tuple[PositionedNode, ...]
    edges: tuple[Edge, ...]
    node_width: float
    node_height: float

    def get(self, node_id: str) -> PositionedNode | None:
        """Return the positioned node with this id, or None if hidden or absent."""
        for positioned in self.nodes:
            if positioned.id == node_id:
                return positioned
        return None

    def node_at(self, world_x: float, world_y: float) -> PositionedNode | None:
        """Return the topmost node whose box contains the world point.

        Later nodes are drawn over earlier ones, so the search runs backwards.
        """
        half_w = self.node_width / 2
        half_h = self.node_height / 2
        for positioned in reversed(self.nodes):
            if abs(world_x - positioned.x) <= half_w and abs(world_y - positioned.y) <= half_h:
                return positioned
        return None


@dataclass(frozen=True)
class Breadcrumb:
    """A single ancestor in a breadcrumb trail."""

    node_id: str
    title: str
    depth: int


@dataclass(frozen=True)
class NodeContext:
    """A node with its surrounding context."""

    node: Node
    depth: int
    breadcrumbs: tuple[Breadcrumb, ...]
    children: tuple[Node, ...]
    siblings_before: tuple[Node, ...]
    siblings_after: tuple[Node, ...]
