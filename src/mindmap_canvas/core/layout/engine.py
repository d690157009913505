"""Depth/sibling tiling layout for mindmap trees."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from loguru import logger

from mindmap_canvas.config import LEVEL_GAP, NODE_HEIGHT, NODE_WIDTH, SIBLING_GAP
from mindmap_canvas.models.node import (
    ZERO_OFFSET,
    Edge,
    LayoutResult,
    Node,
    Offset,
    PositionedNode,
)


@dataclass(frozen=True)
class LayoutConfig:
    """Geometry of the tiling layout, in world units."""

    node_width: float = NODE_WIDTH
    node_height: float = NODE_HEIGHT
    level_gap: float = LEVEL_GAP
    sibling_gap: float = SIBLING_GAP
    origin_x: float = 0.0
    origin_y: float = 0.0


DEFAULT_LAYOUT = LayoutConfig()


def child_anchor_xs(parent_x: float, count: int, config: LayoutConfig) -> list[float]:
    """Return x anchors for count children laid out as a block centered on parent_x."""
    if count == 0:
        return []
    step = config.node_width + config.sibling_gap
    total_width = count * config.node_width + (count - 1) * config.sibling_gap
    start_x = parent_x - total_width / 2
    return [start_x + i * step + config.node_width / 2 for i in range(count)]


def layout(
    root: Node,
    collapsed: frozenset[str] = frozenset(),
    offsets: Mapping[str, Offset] | None = None,
    *,
    config: LayoutConfig = DEFAULT_LAYOUT,
) -> LayoutResult:
    """Compute world positions for every visible node, plus parent/child edges.

    Nodes come out in pre-order. A collapsed node is still emitted but none of
    its descendants are. Each node's manual offset is added to its computed
    anchor, while its children are placed relative to that un-offset anchor,
    so dragging a parent never moves its descendants.

    Args:
        root: Tree root.
        collapsed: Ids whose children are hidden.
        offsets: Manual displacements by node id. Unknown or hidden ids are ignored.
        config: Layout geometry.

    Returns:
        LayoutResult with positioned nodes and edges.
    """
    offsets = offsets or {}
    nodes: list[PositionedNode] = []
    edges: list[Edge] = []

    def place(node: Node, depth: int, anchor_x: float, anchor_y: float) -> PositionedNode:
        is_collapsed = node.id in collapsed
        offset = offsets.get(node.id, ZERO_OFFSET)
        positioned = PositionedNode(
            node=node,
            x=anchor_x + offset.dx,
            y=anchor_y + offset.dy,
            depth=depth,
            collapsed=is_collapsed,
        )
        nodes.append(positioned)

        if not is_collapsed:
            child_y = anchor_y + config.level_gap
            xs = child_anchor_xs(anchor_x, len(node.children), config)
            for child, child_x in zip(node.children, xs, strict=True):
                edges.append(Edge(positioned, place(child, depth + 1, child_x, child_y)))
        return positioned

    place(root, 0, config.origin_x, config.origin_y)
    logger.debug("Layout pass: {} nodes, {} edges", len(nodes), len(edges))
    return LayoutResult(
        nodes=tuple(nodes),
        edges=tuple(edges),
        node_width=config.node_width,
        node_height=config.node_height,
    )


def layout_to_dict(result: LayoutResult) -> dict[str, Any]:
    """Plain-data view of a layout pass, edges as id pairs."""
    return {
        "nodes": [
            {
                "id": p.id,
                "title": p.title,
                "x": p.x,
                "y": p.y,
                "depth": p.depth,
                "collapsed": p.collapsed,
            }
            for p in result.nodes
        ],
        "edges": [{"from": e.source.id, "to": e.target.id} for e in result.edges],
    }
