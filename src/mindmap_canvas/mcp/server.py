"""MCP server exposing mindmap editing, layout and navigation tools."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from mindmap_canvas.config import resolve_document_path
from mindmap_canvas.core.layout.engine import layout_to_dict
from mindmap_canvas.core.tree.markdown import render_subtree_as_markdown
from mindmap_canvas.core.tree.store import find_node
from mindmap_canvas.errors import StorageError
from mindmap_canvas.models.node import Offset
from mindmap_canvas.session import MindmapSession


def _result(session: MindmapSession, ok: bool, **extra: Any) -> dict[str, Any]:
    if ok:
        return {"success": True, **extra}
    messages = [n.message for n in session.drain_notifications()]
    return {"success": False, "error": "; ".join(messages) or "Operation failed."}


# --- Core functions (testable without MCP context) ---


def mindmap_get_layout(session: MindmapSession) -> dict[str, Any]:
    """Return positioned nodes and edges for the current tree."""
    data = layout_to_dict(session.layout)
    data["count"] = len(data["nodes"])
    data["collapsed"] = sorted(session.collapsed)
    data["selected"] = session.selected_id
    return data


def mindmap_add_node(
    session: MindmapSession,
    *,
    parent_id: str,
    title: str,
    summary: str = "",
    description: str | None = None,
    notes: str | None = None,
) -> dict[str, Any]:
    """Append a new node under a parent.

    Args:
        parent_id: Parent node ID.
        title: Title of the new node.
        summary: Short summary.
        description: Optional description.
        notes: Optional notes.
    """
    new_id = session.add_child(
        parent_id, title, summary=summary, description=description, notes=notes
    )
    if new_id is None:
        return _result(session, False)
    return _result(session, True, node_id=new_id)


def mindmap_delete_node(session: MindmapSession, *, node_id: str) -> dict[str, Any]:
    """Delete a node and its subtree. The root cannot be deleted."""
    return _result(session, session.delete_node(node_id), node_id=node_id)


def mindmap_edit_node(
    session: MindmapSession,
    *,
    node_id: str,
    title: str | None = None,
    summary: str | None = None,
    description: str | None = None,
    notes: str | None = None,
) -> dict[str, Any]:
    """Edit a node's title, summary, description or notes.

    Args:
        node_id: Node ID to edit.
        title: New title.
        summary: New summary.
        description: New description.
        notes: New notes.
    """
    ok = session.update_node(
        node_id, title=title, summary=summary, description=description, notes=notes
    )
    return _result(session, ok, node_id=node_id)


def mindmap_toggle_collapse(session: MindmapSession, *, node_id: str) -> dict[str, Any]:
    """Collapse or expand a node's children."""
    ok = session.toggle_collapse(node_id)
    return _result(session, ok, node_id=node_id, collapsed=node_id in session.collapsed)


def mindmap_move_node(
    session: MindmapSession, *, node_id: str, dx: float = 0.0, dy: float = 0.0
) -> dict[str, Any]:
    """Add a manual displacement (world units) to a node's position."""
    if not session.nudge_node(node_id, dx, dy):
        return _result(session, False)
    positioned = session.layout.get(node_id)
    offset = session.offsets.get(node_id, Offset())
    extra: dict[str, Any] = {"node_id": node_id, "offset": {"dx": offset.dx, "dy": offset.dy}}
    if positioned is not None:
        extra["x"] = positioned.x
        extra["y"] = positioned.y
    return _result(session, True, **extra)


def mindmap_get_node_context(
    session: MindmapSession,
    *,
    node_id: str,
) -> dict[str, Any]:
    """Get a node with its level, breadcrumbs, siblings and children."""
    ctx = session.node_context(node_id)
    session.drain_notifications()
    if ctx is None:
        return {"error": f"Node '{node_id}' not found."}
    return {
        "node": {
            "id": ctx.node.id,
            "title": ctx.node.title,
            "summary": ctx.node.summary,
            "description": ctx.node.description,
            "notes": ctx.node.notes,
        },
        "depth": ctx.depth,
        "breadcrumbs": " > ".join(b.title[:40] for b in ctx.breadcrumbs),
        "siblings_before": [{"id": s.id, "title": s.title[:80]} for s in ctx.siblings_before],
        "siblings_after": [{"id": s.id, "title": s.title[:80]} for s in ctx.siblings_after],
        "children": [
            {"id": c.id, "title": c.title[:80], "child_count": len(c.children)}
            for c in ctx.children
        ],
    }


def mindmap_read_outline(
    session: MindmapSession,
    *,
    node_id: str | None = None,
    max_depth: int | None = None,
) -> dict[str, Any]:
    """Render a subtree as a markdown outline."""
    if node_id is not None and find_node(session.tree, node_id) is None:
        return {"error": f"Node '{node_id}' not found."}
    md = render_subtree_as_markdown(session.tree, node_id=node_id, max_depth=max_depth)
    return {"content": md, "node_id": node_id or session.tree.id}


def mindmap_export(session: MindmapSession, *, path: str | None = None) -> dict[str, Any]:
    """Export the document with manual offsets, to a file or inline."""
    if path is None:
        return {"success": True, "document": session.export_document()}
    try:
        written = session.export_file(Path(path).expanduser())
    except StorageError as e:
        return {"success": False, "error": str(e)}
    return {"success": True, "path": path, "written": written}


def mindmap_import(session: MindmapSession, *, path: str) -> dict[str, Any]:
    """Replace the tree with a document file. The tree is kept on failure."""
    ok = session.import_file(Path(path).expanduser())
    return _result(session, ok, title=session.tree.title)


# --- MCP Server Setup ---


@dataclass
class ServerContext:
    """Shared resources for the MCP server lifetime."""

    session: MindmapSession
    document_path: Path


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Load the working document on startup, if there is one."""
    document_path = resolve_document_path()
    session = MindmapSession()
    if document_path.exists() and not session.import_file(document_path):
        logger.warning("Starting with an empty mindmap; could not load {}", document_path)
        session.drain_notifications()
    yield ServerContext(session=session, document_path=document_path)


mcp_server = FastMCP(
    "mindmap-canvas",
    instructions="""\
A mindmap is a tree of nodes (title, summary, optional description and notes).
The root node has id "root" in new documents and can never be deleted.

## Workflow
1. Call mindmap_get_layout_tool or mindmap_read_outline_tool to see the tree.
2. Use node ids from those results with the edit/add/delete tools.
3. Call mindmap_save_tool to write changes back to the working document.

Manual moves are stored as offsets on top of the computed layout; moving a
parent does not move its children.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[return-value]


# --- MCP Tool Wrappers ---


@mcp_server.tool()
async def mindmap_get_layout_tool(ctx: Context) -> dict[str, Any]:
    """Get computed positions of all visible nodes and the edges between them."""
    return mindmap_get_layout(_ctx(ctx).session)


@mcp_server.tool()
async def mindmap_read_outline_tool(
    ctx: Context,
    node_id: str | None = None,
    max_depth: int | None = None,
) -> dict[str, Any]:
    """Read a node and its subtree as a markdown outline.

    Args:
        node_id: Node to start from (default: root).
        max_depth: Max depth levels (None = unlimited).
    """
    return mindmap_read_outline(_ctx(ctx).session, node_id=node_id, max_depth=max_depth)


@mcp_server.tool()
async def mindmap_get_node_context_tool(ctx: Context, node_id: str) -> dict[str, Any]:
    """Get a node with its level, breadcrumbs, siblings and children."""
    return mindmap_get_node_context(_ctx(ctx).session, node_id=node_id)


@mcp_server.tool()
async def mindmap_add_node_tool(
    ctx: Context,
    parent_id: str,
    title: str,
    summary: str = "",
    description: str | None = None,
    notes: str | None = None,
) -> dict[str, Any]:
    """Add a new node as the last child of a parent.

    Args:
        parent_id: Parent node ID.
        title: Title of the new node.
        summary: Short summary.
        description: Optional description.
        notes: Optional notes.
    """
    return mindmap_add_node(
        _ctx(ctx).session,
        parent_id=parent_id,
        title=title,
        summary=summary,
        description=description,
        notes=notes,
    )


@mcp_server.tool()
async def mindmap_edit_node_tool(
    ctx: Context,
    node_id: str,
    title: str | None = None,
    summary: str | None = None,
    description: str | None = None,
    notes: str | None = None,
) -> dict[str, Any]:
    """Edit a node's text fields. Omitted fields are left unchanged."""
    return mindmap_edit_node(
        _ctx(ctx).session,
        node_id=node_id,
        title=title,
        summary=summary,
        description=description,
        notes=notes,
    )


@mcp_server.tool()
async def mindmap_delete_node_tool(ctx: Context, node_id: str) -> dict[str, Any]:
    """Delete a node and its whole subtree."""
    return mindmap_delete_node(_ctx(ctx).session, node_id=node_id)


@mcp_server.tool()
async def mindmap_toggle_collapse_tool(ctx: Context, node_id: str) -> dict[str, Any]:
    """Collapse or expand a node. Collapsed children are hidden from the layout."""
    return mindmap_toggle_collapse(_ctx(ctx).session, node_id=node_id)


@mcp_server.tool()
async def mindmap_move_node_tool(
    ctx: Context, node_id: str, dx: float = 0.0, dy: float = 0.0
) -> dict[str, Any]:
    """Move a node by (dx, dy) world units on top of its computed position."""
    return mindmap_move_node(_ctx(ctx).session, node_id=node_id, dx=dx, dy=dy)


@mcp_server.tool()
async def mindmap_import_tool(ctx: Context, path: str) -> dict[str, Any]:
    """Replace the mindmap with a JSON document file."""
    return mindmap_import(_ctx(ctx).session, path=path)


@mcp_server.tool()
async def mindmap_save_tool(ctx: Context, path: str | None = None) -> dict[str, Any]:
    """Export the mindmap to a file (default: the working document)."""
    server_ctx = _ctx(ctx)
    return mindmap_export(server_ctx.session, path=path or str(server_ctx.document_path))


def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    from mindmap_canvas.logging_config import configure_logging

    configure_logging(verbose=False)
    mcp_server.run(transport="stdio")
