"""CLI for mindmap-canvas (edit, layout, import/export, MCP server).

Every command works on one document file: it is imported into a fresh
session, the command runs, and the session is exported back only when the
command succeeded.
"""

import json
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from mindmap_canvas.config import resolve_document_path
from mindmap_canvas.core.layout.engine import layout, layout_to_dict
from mindmap_canvas.core.serialization.document import export_document, write_document
from mindmap_canvas.core.tree.markdown import render_subtree_as_markdown
from mindmap_canvas.core.tree.store import find_node
from mindmap_canvas.errors import ExternalFailureError, StorageError
from mindmap_canvas.logging_config import configure_logging
from mindmap_canvas.sample import sample_tree
from mindmap_canvas.models.node import Offset
from mindmap_canvas.session import MindmapSession

app = typer.Typer(help="mindmap-canvas: edit and lay out mindmap documents.")

FileOption = Annotated[
    Path | None,
    typer.Option("--file", "-f", help="Mindmap document (default: ./mindmap-data.json)"),
]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


def _report(session: MindmapSession) -> None:
    for notification in session.drain_notifications():
        typer.echo(f"Error: {notification.message}", err=True)


def _open_session(file: Path | None) -> tuple[MindmapSession, Path]:
    """Load the working document, raising if it doesn't exist or is invalid."""
    path = file or resolve_document_path()
    if not path.exists():
        logger.error("Mindmap document not found: {}. Run 'new' first.", path)
        raise typer.Exit(1)
    session = MindmapSession()
    if not session.import_file(path):
        _report(session)
        raise typer.Exit(1)
    return session, path


def _save(session: MindmapSession, path: Path) -> bool:
    """Export to path, exiting on write errors. Returns False if already current."""
    try:
        return session.export_file(path)
    except StorageError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e


def _finish(session: MindmapSession, path: Path, ok: bool) -> None:
    """Save after a successful mutation, or report and exit on failure."""
    if not ok:
        _report(session)
        raise typer.Exit(1)
    _save(session, path)


@app.command()
def new(
    file: FileOption = None,
    force: bool = typer.Option(False, "--force", help="Overwrite an existing document"),
) -> None:
    """Write the sample mindmap to a new document."""
    path = file or resolve_document_path()
    if path.exists() and not force:
        typer.echo(f"Error: '{path}' already exists. Use --force to overwrite.", err=True)
        raise typer.Exit(1)
    try:
        write_document(path, sample_tree())
    except StorageError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e
    typer.echo(f"Created {path}")


@app.command()
def show(
    node_id: Annotated[
        str | None, typer.Argument(help="Node to start from (default: root)")
    ] = None,
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels to render"),
    ] = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    file: FileOption = None,
) -> None:
    """Show a node and its subtree as a markdown outline."""
    session, _path = _open_session(file)
    start = session.tree if node_id is None else find_node(session.tree, node_id)
    if start is None:
        typer.echo(f"Node '{node_id}' not found.", err=True)
        raise typer.Exit(1)

    if output_json:
        typer.echo(json.dumps(export_document(start, session.offsets), indent=2))
        return
    typer.echo(
        render_subtree_as_markdown(session.tree, node_id=start.id, max_depth=max_depth), nl=False
    )


@app.command()
def context(
    node_id: str = typer.Argument(..., help="Node ID"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    file: FileOption = None,
) -> None:
    """Show a node with its level, breadcrumbs, siblings and children."""
    session, _path = _open_session(file)
    ctx = session.node_context(node_id)
    if ctx is None:
        _report(session)
        raise typer.Exit(1)

    if output_json:
        data = {
            "node": {"id": ctx.node.id, "title": ctx.node.title, "summary": ctx.node.summary},
            "depth": ctx.depth,
            "breadcrumbs": [b.title for b in ctx.breadcrumbs],
            "siblings_before": [s.id for s in ctx.siblings_before],
            "siblings_after": [s.id for s in ctx.siblings_after],
            "children": [{"id": c.id, "title": c.title} for c in ctx.children],
        }
        typer.echo(json.dumps(data, indent=2))
        return

    typer.echo(f"{ctx.node.title}  [id={ctx.node.id}]  Level {ctx.depth}")
    if ctx.breadcrumbs:
        typer.echo("  " + " > ".join(b.title for b in ctx.breadcrumbs))
    if ctx.node.summary:
        typer.echo(f"  {ctx.node.summary}")
    if ctx.node.description:
        typer.echo(f"  {ctx.node.description}")
    if ctx.children:
        typer.echo(f"\n  Children ({len(ctx.children)}):")
        for child in ctx.children:
            typer.echo(f"    - {child.title}  [id={child.id}]")


@app.command()
def add(
    parent_id: str = typer.Argument(..., help="Parent node ID"),
    title: str = typer.Option(..., "--title", "-t", help="Title of the new node"),
    summary: str = typer.Option("", "--summary", "-s", help="Short summary"),
    description: Annotated[str | None, typer.Option("--description", help="Description")] = None,
    notes: Annotated[str | None, typer.Option("--notes", help="Notes")] = None,
    file: FileOption = None,
) -> None:
    """Add a node as the last child of a parent."""
    session, path = _open_session(file)
    new_id = session.add_child(
        parent_id, title, summary=summary, description=description, notes=notes
    )
    _finish(session, path, new_id is not None)
    typer.echo(f"Added {new_id}")


@app.command()
def delete(
    node_id: str = typer.Argument(..., help="Node ID to delete (with its subtree)"),
    file: FileOption = None,
) -> None:
    """Delete a node and its subtree."""
    session, path = _open_session(file)
    _finish(session, path, session.delete_node(node_id))
    typer.echo(f"Deleted {node_id}")


@app.command()
def edit(
    node_id: str = typer.Argument(..., help="Node ID to edit"),
    title: Annotated[str | None, typer.Option("--title", "-t", help="New title")] = None,
    summary: Annotated[str | None, typer.Option("--summary", "-s", help="New summary")] = None,
    description: Annotated[
        str | None, typer.Option("--description", help="New description")
    ] = None,
    notes: Annotated[str | None, typer.Option("--notes", help="New notes")] = None,
    file: FileOption = None,
) -> None:
    """Edit a node's title, summary, description or notes."""
    session, path = _open_session(file)
    ok = session.update_node(
        node_id, title=title, summary=summary, description=description, notes=notes
    )
    _finish(session, path, ok)
    typer.echo(f"Updated {node_id}")


@app.command()
def move(
    node_id: str = typer.Argument(..., help="Node ID to move"),
    dx: float = typer.Option(0.0, "--dx", help="Horizontal displacement (world units)"),
    dy: float = typer.Option(0.0, "--dy", help="Vertical displacement (world units)"),
    file: FileOption = None,
) -> None:
    """Add a manual displacement to a node's position."""
    session, path = _open_session(file)
    _finish(session, path, session.nudge_node(node_id, dx, dy))
    offset = session.offsets.get(node_id, Offset())
    typer.echo(f"Moved {node_id}: manual offset ({offset.dx:g}, {offset.dy:g})")


@app.command(name="reset-offsets")
def reset_offsets(file: FileOption = None) -> None:
    """Drop every manual offset."""
    session, path = _open_session(file)
    session.clear_offsets()
    _finish(session, path, True)
    typer.echo("Manual offsets cleared")


@app.command(name="layout")
def layout_cmd(
    collapse: Annotated[
        list[str] | None,
        typer.Option("--collapse", "-c", help="Collapse this node (repeatable)"),
    ] = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    file: FileOption = None,
) -> None:
    """Print computed node positions and edges."""
    session, _path = _open_session(file)
    result = layout(
        session.tree,
        frozenset(collapse or ()),
        session.offsets,
        config=session.layout_config,
    )

    if output_json:
        typer.echo(json.dumps(layout_to_dict(result), indent=2))
        return

    typer.echo(f"{len(result.nodes)} nodes, {len(result.edges)} edges:\n")
    for p in result.nodes:
        marker = " [+]" if p.collapsed else ""
        indent = "  " * p.depth
        typer.echo(f"  {indent}{p.title}{marker}  ({p.x:g}, {p.y:g})  [id={p.id}]")


@app.command(name="import")
def import_cmd(
    source: Path = typer.Argument(..., help="Document to import"),
    file: FileOption = None,
) -> None:
    """Replace the working document with an imported one.

    The working document is left untouched when the import is invalid.
    """
    path = file or resolve_document_path()
    session = MindmapSession()
    if not session.import_file(source):
        _report(session)
        raise typer.Exit(1)
    _save(session, path)
    typer.echo(f"Imported '{session.tree.title}' into {path}")


@app.command()
def export(
    dest: Path = typer.Argument(..., help="Destination file"),
    file: FileOption = None,
) -> None:
    """Export the working document, manual offsets included."""
    session, _path = _open_session(file)
    if _save(session, dest):
        typer.echo(f"Exported to {dest}")
    else:
        typer.echo(f"{dest} is already up to date")


@app.command()
def generate(
    topic: str = typer.Argument(..., help="Topic to generate a mindmap for"),
    url: Annotated[
        str | None,
        typer.Option("--url", "-u", help="Generator endpoint (default: MINDMAP_GENERATOR_URL)"),
    ] = None,
    file: FileOption = None,
) -> None:
    """Replace the working document with generated content."""
    from mindmap_canvas.generator import ContentGenerator

    path = file or resolve_document_path()
    try:
        generator = ContentGenerator(url)
    except ExternalFailureError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    session = MindmapSession()
    _finish(session, path, session.generate(topic, generator))
    typer.echo(f"Generated '{session.tree.title}' into {path}")


@app.command()
def serve() -> None:
    """Start the MCP server (stdio transport)."""
    from mindmap_canvas.mcp.server import run_mcp_server

    run_mcp_server()
