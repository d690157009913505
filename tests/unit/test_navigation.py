"""Tests for tree navigation (breadcrumbs, siblings, node context)."""

import pytest

from mindmap_canvas.core.tree.navigation import (
    get_breadcrumbs,
    get_children,
    get_node_context,
    get_siblings,
)
from mindmap_canvas.errors import NotFoundError
from mindmap_canvas.models.node import Breadcrumb, Node


def test_breadcrumbs_for_nested_node(family_tree: Node) -> None:
    """a1 sits at root/a/a1, so breadcrumbs are root then a."""
    assert get_breadcrumbs(family_tree, "a1") == (
        Breadcrumb(node_id="root", title="Root", depth=0),
        Breadcrumb(node_id="a", title="Alpha", depth=1),
    )


def test_breadcrumbs_for_root_are_empty(family_tree: Node) -> None:
    assert get_breadcrumbs(family_tree, "root") == ()


def test_siblings_of_middle_node(family_tree: Node) -> None:
    before, after = get_siblings(family_tree, "b")
    assert [n.id for n in before] == ["a"]
    assert [n.id for n in after] == ["c"]


def test_siblings_respect_count(family_tree: Node) -> None:
    before, after = get_siblings(family_tree, "a", count=1)
    assert before == ()
    assert [n.id for n in after] == ["b"]


def test_root_has_no_siblings(family_tree: Node) -> None:
    assert get_siblings(family_tree, "root") == ((), ())


def test_children_in_array_order_with_limit(family_tree: Node) -> None:
    assert [c.id for c in get_children(family_tree, "root")] == ["a", "b", "c"]
    assert [c.id for c in get_children(family_tree, "root", limit=2)] == ["a", "b"]


def test_node_context_collects_everything(family_tree: Node) -> None:
    ctx = get_node_context(family_tree, "c1")
    assert ctx.node.title == "Gamma One"
    assert ctx.depth == 2
    assert [b.node_id for b in ctx.breadcrumbs] == ["root", "c"]
    assert ctx.children == ()
    assert ctx.siblings_before == ctx.siblings_after == ()


def test_unknown_node_raises(family_tree: Node) -> None:
    with pytest.raises(NotFoundError, match="ghost"):
        get_node_context(family_tree, "ghost")
