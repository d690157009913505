"""Editable mindmap trees with tiling layout, pan/zoom and JSON import/export."""

from mindmap_canvas.core.interaction.controller import InteractionController, InteractionState
from mindmap_canvas.core.layout.engine import LayoutConfig, layout
from mindmap_canvas.core.serialization.document import export_document, import_document
from mindmap_canvas.core.view.transform import ViewTransform
from mindmap_canvas.errors import (
    ExternalFailureError,
    InvalidFormatError,
    InvalidOperationError,
    MindmapError,
    NotFoundError,
    StorageError,
)
from mindmap_canvas.models.node import ROOT_ID, Edge, LayoutResult, Node, Offset, PositionedNode
from mindmap_canvas.session import MindmapSession

__all__ = [
    "ROOT_ID",
    "Edge",
    "ExternalFailureError",
    "InteractionController",
    "InteractionState",
    "InvalidFormatError",
    "InvalidOperationError",
    "LayoutConfig",
    "LayoutResult",
    "MindmapError",
    "MindmapSession",
    "Node",
    "NotFoundError",
    "Offset",
    "PositionedNode",
    "StorageError",
    "ViewTransform",
    "export_document",
    "import_document",
    "layout",
]
