"""The editing session: one tree plus the view state that goes with it.

All state of a live mindmap is owned here and nowhere else. Every accepted
mutation is applied whole and is followed by a full layout pass; a refused
mutation leaves every field untouched and adds a user-visible notification.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger

from mindmap_canvas.core.layout.engine import DEFAULT_LAYOUT, LayoutConfig, layout
from mindmap_canvas.core.serialization import document as serialization
from mindmap_canvas.core.tree import store
from mindmap_canvas.core.tree.navigation import get_node_context
from mindmap_canvas.core.view.transform import ViewTransform
from mindmap_canvas.errors import (
    ExternalFailureError,
    InvalidOperationError,
    MindmapError,
    NotFoundError,
)
from mindmap_canvas.generator import validate_generated_document
from mindmap_canvas.models.node import ROOT_ID, LayoutResult, Node, NodeContext, Offset
from mindmap_canvas.protocols import ContainerProtocol, GeneratorProtocol


@dataclass(frozen=True)
class Notification:
    """A message to show the user."""

    level: str
    message: str


class MindmapSession:
    """Tree, collapse set, offsets, view transform, selection and hover."""

    def __init__(
        self,
        tree: Node | None = None,
        offsets: Mapping[str, Offset] | None = None,
        *,
        container: ContainerProtocol | None = None,
        view: ViewTransform | None = None,
        layout_config: LayoutConfig = DEFAULT_LAYOUT,
    ) -> None:
        self.tree = tree if tree is not None else Node(id=ROOT_ID, title="Untitled")
        self.offsets: dict[str, Offset] = dict(offsets or {})
        self.collapsed: frozenset[str] = frozenset()
        self.selected_id: str | None = None
        self.hovered_id: str | None = None
        self.notifications: list[Notification] = []
        self.container = container
        self.view = view if view is not None else ViewTransform()
        self.layout_config = layout_config
        self.layout: LayoutResult = self._relayout()

    def _relayout(self) -> LayoutResult:
        self.layout = layout(self.tree, self.collapsed, self.offsets, config=self.layout_config)
        return self.layout

    def _refuse(self, error: MindmapError) -> bool:
        logger.warning("{}: {}", type(error).__name__, error)
        self.notifications.append(Notification(level="error", message=str(error)))
        return False

    def _require(self, node_id: str) -> Node:
        node = store.find_node(self.tree, node_id)
        if node is None:
            msg = f"Node '{node_id}' not found."
            raise NotFoundError(msg)
        return node

    def drain_notifications(self) -> list[Notification]:
        """Return and clear pending notifications."""
        pending, self.notifications = self.notifications, []
        return pending

    # --- Tree mutations ---

    def add_child(
        self,
        parent_id: str,
        title: str,
        summary: str = "",
        description: str | None = None,
        notes: str | None = None,
    ) -> str | None:
        """Append a new node under parent_id. Returns its id, or None if refused."""
        node = Node(
            id=store.new_node_id(self.tree),
            title=title,
            summary=summary,
            description=description,
            notes=notes,
        )
        try:
            self.tree = store.insert_child(self.tree, parent_id, node)
        except MindmapError as e:
            self._refuse(e)
            return None
        self._relayout()
        return node.id

    def delete_node(self, node_id: str) -> bool:
        """Delete a subtree and prune every reference to the removed ids."""
        try:
            tree = store.delete_node(self.tree, node_id)
        except MindmapError as e:
            return self._refuse(e)

        remaining = store.collect_ids(tree)
        self.tree = tree
        self.offsets = store.prune_offsets(self.offsets, remaining)
        self.collapsed = self.collapsed & remaining
        if self.selected_id not in remaining:
            self.selected_id = None
        if self.hovered_id not in remaining:
            self.hovered_id = None
        self._relayout()
        return True

    def update_node(
        self,
        node_id: str,
        *,
        title: str | None = None,
        summary: str | None = None,
        description: str | None = None,
        notes: str | None = None,
    ) -> bool:
        try:
            self.tree = store.update_node(
                self.tree,
                node_id,
                title=title,
                summary=summary,
                description=description,
                notes=notes,
            )
        except MindmapError as e:
            return self._refuse(e)
        self._relayout()
        return True

    def toggle_collapse(self, node_id: str) -> bool:
        try:
            self._require(node_id)
        except MindmapError as e:
            return self._refuse(e)
        self.collapsed = store.toggle_collapse(self.collapsed, node_id)
        self._relayout()
        return True

    # --- Manual layout ---

    def nudge_node(self, node_id: str, dx: float, dy: float) -> bool:
        """Add a world-space displacement to node_id's manual offset.

        An offset that nets to zero is dropped, matching how import treats it.
        """
        try:
            self._require(node_id)
            if not (math.isfinite(dx) and math.isfinite(dy)):
                msg = f"Cannot move '{node_id}' by a non-finite amount."
                raise InvalidOperationError(msg)
        except MindmapError as e:
            return self._refuse(e)
        offset = self.offsets.get(node_id, Offset()) + Offset(dx, dy)
        offsets = {k: v for k, v in self.offsets.items() if k != node_id}
        if not offset.is_zero:
            offsets[node_id] = offset
        self.offsets = offsets
        self._relayout()
        return True

    def clear_offsets(self) -> None:
        self.offsets = {}
        self._relayout()

    # --- Selection and hover ---

    def select(self, node_id: str | None) -> bool:
        if node_id is not None:
            try:
                self._require(node_id)
            except MindmapError as e:
                return self._refuse(e)
        self.selected_id = node_id
        return True

    def hover(self, node_id: str | None) -> None:
        self.hovered_id = node_id

    def node_context(self, node_id: str) -> NodeContext | None:
        try:
            return get_node_context(self.tree, node_id)
        except MindmapError as e:
            self._refuse(e)
            return None

    # --- View ---

    def reset_view(self) -> None:
        """Reset zoom and re-anchor pan to the container's current size."""
        width, height = self.container.size() if self.container is not None else (0.0, 0.0)
        self.view.reset(width, height)

    def on_container_resize(self) -> None:
        self.reset_view()

    # --- Import / export ---

    def replace_tree(self, tree: Node, offsets: Mapping[str, Offset] | None = None) -> None:
        """Swap in a new tree. Collapse state, selection and hover start over."""
        self.tree = tree
        self.offsets = dict(offsets or {})
        self.collapsed = frozenset()
        self.selected_id = None
        self.hovered_id = None
        self.reset_view()
        self._relayout()
        logger.debug("Loaded mindmap '{}'", tree.title)

    def import_document(self, doc: Any) -> bool:
        try:
            tree, offsets = serialization.import_document(doc)
        except MindmapError as e:
            return self._refuse(e)
        self.replace_tree(tree, offsets)
        return True

    def import_json(self, text: str) -> bool:
        try:
            tree, offsets = serialization.loads_document(text)
        except MindmapError as e:
            return self._refuse(e)
        self.replace_tree(tree, offsets)
        return True

    def import_file(self, path: Path) -> bool:
        try:
            tree, offsets = serialization.read_document(path)
        except MindmapError as e:
            return self._refuse(e)
        self.replace_tree(tree, offsets)
        return True

    def export_document(self) -> dict[str, Any]:
        return serialization.export_document(self.tree, self.offsets)

    def export_json(self) -> str:
        return serialization.dumps_document(self.tree, self.offsets)

    def export_file(self, path: Path) -> bool:
        """Write the document to path. Returns False if the file was already current.

        Raises:
            StorageError: The file cannot be written.
        """
        return serialization.write_document(path, self.tree, self.offsets)

    def generate(self, topic: str, generator: GeneratorProtocol) -> bool:
        """Replace the tree with generated content for topic.

        Any failure, including a reply that fails validation, keeps the
        current tree.
        """
        try:
            doc = generator.generate(topic)
        except MindmapError as e:
            return self._refuse(e)
        except Exception as e:
            logger.opt(exception=True).debug("Generator raised")
            msg = f"Generator failed: {e}"
            return self._refuse(ExternalFailureError(msg))

        try:
            validate_generated_document(doc)
            tree, offsets = serialization.import_document(doc)
        except ExternalFailureError as e:
            return self._refuse(e)
        except MindmapError as e:
            msg = f"Generated content is invalid: {e}"
            return self._refuse(ExternalFailureError(msg))

        self.replace_tree(tree, offsets)
        return True
