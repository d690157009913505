"""Shared test fixtures."""

import json
from pathlib import Path

import pytest

from mindmap_canvas.core.serialization.document import export_document
from mindmap_canvas.core.view.transform import ViewTransform
from mindmap_canvas.models.node import Node, Offset
from mindmap_canvas.session import MindmapSession
from tests.unit.fakes import FakeContainer
from tests.unit.trees import FAMILY_TREE


@pytest.fixture
def family_tree() -> Node:
    return FAMILY_TREE


@pytest.fixture
def container() -> FakeContainer:
    return FakeContainer(1000.0, 800.0)


@pytest.fixture
def session(container: FakeContainer) -> MindmapSession:
    """A session on the family tree, panned so the root sits at screen (500, 100)."""
    return MindmapSession(
        FAMILY_TREE,
        container=container,
        view=ViewTransform(pan_x=500.0, pan_y=100.0, scale=1.0),
    )


@pytest.fixture
def document_file(tmp_path: Path) -> Path:
    """A working document with the family tree and one manual offset."""
    path = tmp_path / "mindmap-data.json"
    path.write_text(json.dumps(export_document(FAMILY_TREE, {"b": Offset(15.0, -5.0)})))
    return path
