"""Render mindmap subtrees as markdown outlines."""

import io

from mindmap_canvas.core.tree.store import find_node
from mindmap_canvas.models.node import Node


def render_subtree_as_markdown(
    root: Node,
    *,
    node_id: str | None = None,
    max_depth: int | None = None,
    include_details: bool = True,
) -> str:
    """Render a node and its descendants as indented markdown.

    Args:
        root: Tree root.
        node_id: The node to start rendering from (None = root).
        max_depth: Max levels below the start node to include (None = unlimited).
        include_details: Whether to include summaries, descriptions and notes.

    Returns:
        Markdown string with bullet-list hierarchy, or "" if node_id is absent.
    """
    start = root if node_id is None else find_node(root, node_id)
    if start is None:
        return ""

    out = io.StringIO()

    def write(node: Node, relative_depth: int) -> None:
        indent = "    " * relative_depth
        lines = node.title.split("\n")
        out.write(f"{indent}- **{lines[0]}**\n")
        for line in lines[1:]:
            out.write(f"{indent}  {line}\n")

        if include_details:
            if node.summary:
                out.write(f"{indent}  {node.summary}\n")
            for text in (node.description, node.notes):
                if text:
                    for text_line in text.split("\n"):
                        out.write(f"{indent}  > {text_line}\n")

        if not node.children:
            return
        # Truncation indicator when children are cut off by max_depth
        if max_depth is not None and relative_depth >= max_depth:
            child_count = len(node.children)
            noun = "child" if child_count == 1 else "children"
            child_indent = "    " * (relative_depth + 1)
            out.write(f"{child_indent}- ... ({child_count} more {noun}, id={node.id})\n")
            return
        for child in node.children:
            write(child, relative_depth + 1)

    write(start, 0)
    return out.getvalue()
