"""Tree mutations on immutable mindmap trees.

Every mutation returns a new root and leaves its input untouched, so a failed
operation never leaves a half-applied tree behind. Unchanged subtrees are
shared between the old and new root.
"""

import time
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import replace

from loguru import logger

from mindmap_canvas.errors import InvalidOperationError, NotFoundError
from mindmap_canvas.models.node import Node, Offset


def iter_nodes(root: Node) -> Iterator[tuple[Node, int]]:
    """Yield (node, depth) pairs in pre-order, siblings in array order."""
    todo: list[tuple[Node, int]] = [(root, 0)]
    while todo:
        node, depth = todo.pop()
        yield node, depth
        todo.extend((child, depth + 1) for child in reversed(node.children))


def find_node(root: Node, node_id: str) -> Node | None:
    for node, _depth in iter_nodes(root):
        if node.id == node_id:
            return node
    return None


def collect_ids(root: Node) -> set[str]:
    return {node.id for node, _depth in iter_nodes(root)}


def _map_node(node: Node, node_id: str, fn: Callable[[Node], Node]) -> Node | None:
    """Rebuild the path down to node_id with fn applied to it; None if absent."""
    if node.id == node_id:
        return fn(node)
    for i, child in enumerate(node.children):
        mapped = _map_node(child, node_id, fn)
        if mapped is not None:
            return replace(node, children=(*node.children[:i], mapped, *node.children[i + 1 :]))
    return None


def _remove_node(node: Node, node_id: str) -> Node | None:
    """Rebuild the path to node_id's parent without node_id; None if absent."""
    for i, child in enumerate(node.children):
        if child.id == node_id:
            return replace(node, children=(*node.children[:i], *node.children[i + 1 :]))
        pruned = _remove_node(child, node_id)
        if pruned is not None:
            return replace(node, children=(*node.children[:i], pruned, *node.children[i + 1 :]))
    return None


def insert_child(root: Node, parent_id: str, node: Node) -> Node:
    """Append node as the last child of parent_id.

    The caller guarantees that node.id (and every id below it) is unused,
    see new_node_id().

    Raises:
        NotFoundError: No node has parent_id.
    """
    new_root = _map_node(root, parent_id, lambda p: replace(p, children=(*p.children, node)))
    if new_root is None:
        msg = f"Parent node '{parent_id}' not found."
        raise NotFoundError(msg)
    logger.debug("Inserted {} under {}", node.id, parent_id)
    return new_root


def delete_node(root: Node, node_id: str) -> Node:
    """Remove the subtree rooted at node_id.

    Offsets, selection and collapse entries for the removed ids are not
    touched here; callers prune them with collect_ids() and prune_offsets().

    Raises:
        InvalidOperationError: node_id is the root.
        NotFoundError: No node has node_id.
    """
    if node_id == root.id:
        msg = "The root node cannot be deleted."
        raise InvalidOperationError(msg)
    new_root = _remove_node(root, node_id)
    if new_root is None:
        msg = f"Node '{node_id}' not found."
        raise NotFoundError(msg)
    logger.debug("Deleted subtree {}", node_id)
    return new_root


def update_node(
    root: Node,
    node_id: str,
    *,
    title: str | None = None,
    summary: str | None = None,
    description: str | None = None,
    notes: str | None = None,
) -> Node:
    """Replace text fields on node_id. None leaves a field unchanged.

    Raises:
        InvalidOperationError: No field was given.
        NotFoundError: No node has node_id.
    """
    fields = {
        key: value
        for key, value in (
            ("title", title),
            ("summary", summary),
            ("description", description),
            ("notes", notes),
        )
        if value is not None
    }
    if not fields:
        msg = "No fields to update."
        raise InvalidOperationError(msg)

    new_root = _map_node(root, node_id, lambda n: replace(n, **fields))
    if new_root is None:
        msg = f"Node '{node_id}' not found."
        raise NotFoundError(msg)
    logger.debug("Updated {} ({})", node_id, ", ".join(sorted(fields)))
    return new_root


def toggle_collapse(collapsed: frozenset[str], node_id: str) -> frozenset[str]:
    """Flip membership of node_id. Legal for leaves, where it has no visible effect."""
    if node_id in collapsed:
        return collapsed - {node_id}
    return collapsed | {node_id}


def prune_offsets(offsets: Mapping[str, Offset], valid_ids: Iterable[str]) -> dict[str, Offset]:
    """Drop offsets whose node no longer exists."""
    keep = set(valid_ids)
    return {node_id: offset for node_id, offset in offsets.items() if node_id in keep}


def new_node_id(root: Node, *, now: float | None = None) -> str:
    """Generate a time-based node id unused anywhere in root.

    Appends -1, -2, ... on collision.
    """
    base = f"node-{int((time.time() if now is None else now) * 1000)}"
    existing = collect_ids(root)
    candidate = base
    count = 0
    while candidate in existing:
        count += 1
        candidate = f"{base}-{count}"
    return candidate
