"""Tree navigation: breadcrumbs, siblings, children, node context."""

from mindmap_canvas.errors import NotFoundError
from mindmap_canvas.models.node import Breadcrumb, Node, NodeContext


def _path_to(root: Node, node_id: str) -> list[Node] | None:
    """Return the nodes from root down to node_id inclusive, or None if absent."""
    if root.id == node_id:
        return [root]
    for child in root.children:
        sub_path = _path_to(child, node_id)
        if sub_path is not None:
            return [root, *sub_path]
    return None


def _require_path(root: Node, node_id: str) -> list[Node]:
    path = _path_to(root, node_id)
    if path is None:
        msg = f"Node '{node_id}' not found."
        raise NotFoundError(msg)
    return path


def get_breadcrumbs(root: Node, node_id: str) -> tuple[Breadcrumb, ...]:
    """Get ancestor breadcrumbs for a node.

    Returns breadcrumbs in order from root to immediate parent (excludes the node itself).
    """
    path = _require_path(root, node_id)
    return tuple(
        Breadcrumb(node_id=n.id, title=n.title, depth=depth) for depth, n in enumerate(path[:-1])
    )


def get_siblings(
    root: Node, node_id: str, *, count: int = 3
) -> tuple[tuple[Node, ...], tuple[Node, ...]]:
    """Get siblings before and after a node.

    Returns (siblings_before, siblings_after) tuples. The root has no siblings.
    """
    path = _require_path(root, node_id)
    if len(path) < 2:
        return (), ()
    siblings = path[-2].children
    index = next(i for i, s in enumerate(siblings) if s.id == node_id)
    return siblings[max(0, index - count) : index], siblings[index + 1 : index + 1 + count]


def get_children(root: Node, node_id: str, *, limit: int = 50) -> tuple[Node, ...]:
    """Get direct children of a node, in array order."""
    return _require_path(root, node_id)[-1].children[:limit]


def get_node_context(
    root: Node,
    node_id: str,
    *,
    sibling_count: int = 3,
    child_limit: int = 50,
) -> NodeContext:
    """Get a node with its depth, breadcrumbs, siblings and children.

    Raises:
        NotFoundError: No node has node_id.
    """
    path = _require_path(root, node_id)
    before, after = get_siblings(root, node_id, count=sibling_count)
    return NodeContext(
        node=path[-1],
        depth=len(path) - 1,
        breadcrumbs=get_breadcrumbs(root, node_id),
        children=path[-1].children[:child_limit],
        siblings_before=before,
        siblings_after=after,
    )
