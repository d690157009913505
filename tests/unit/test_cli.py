"""Tests for the mindmap CLI."""

import json
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from loguru import logger
from typer.testing import CliRunner

from mindmap_canvas.cli import app
from mindmap_canvas.core.serialization.document import read_document
from mindmap_canvas.models.node import Offset
from tests.unit.fakes import FakeGenerator

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_logger() -> Iterator[None]:
    """Drop sinks bound to the runner's captured streams."""
    yield
    logger.remove()


def _invoke(path: Path, *args: str) -> tuple[int, str]:
    result = runner.invoke(app, [*args, "--file", str(path)])
    return result.exit_code, result.output


def test_new_writes_sample_document(tmp_path: Path) -> None:
    path = tmp_path / "map.json"
    code, output = _invoke(path, "new")
    assert code == 0, output
    tree, offsets = read_document(path)
    assert tree.title == "Modern Web Development"
    assert offsets == {}


def test_new_refuses_to_overwrite(document_file: Path) -> None:
    code, output = _invoke(document_file, "new")
    assert code == 1
    assert "--force" in output
    assert read_document(document_file)[0].title == "Root"

    code, _ = _invoke(document_file, "new", "--force")
    assert code == 0


def test_missing_document_exits_with_error(tmp_path: Path) -> None:
    code, _ = _invoke(tmp_path / "missing.json", "show")
    assert code == 1


def test_show_renders_outline(document_file: Path) -> None:
    code, output = _invoke(document_file, "show", "--max-depth", "1")
    assert code == 0, output
    assert "- **Root**" in output
    assert "- **Beta**" in output
    assert "Alpha One" not in output
    assert "2 more children" in output


def test_show_json_includes_offsets(document_file: Path) -> None:
    code, output = _invoke(document_file, "show", "b", "--json")
    assert code == 0, output
    data = json.loads(output)
    assert data["id"] == "b"
    assert data["manualOffset"] == {"dx": 15.0, "dy": -5.0}


def test_show_unknown_node(document_file: Path) -> None:
    code, output = _invoke(document_file, "show", "ghost")
    assert code == 1
    assert "ghost" in output


def test_context_json(document_file: Path) -> None:
    code, output = _invoke(document_file, "context", "a1", "--json")
    assert code == 0, output
    data = json.loads(output)
    assert data["depth"] == 2
    assert data["breadcrumbs"] == ["Root", "Alpha"]
    assert data["siblings_after"] == ["a2"]


def test_add_edit_delete_round_trip(document_file: Path) -> None:
    code, output = _invoke(document_file, "add", "b", "--title", "Beta One")
    assert code == 0, output
    new_id = output.strip().removeprefix("Added ")
    tree, _ = read_document(document_file)
    assert [c.title for c in tree.children[1].children] == ["Beta One"]

    code, output = _invoke(document_file, "edit", new_id, "--summary", "sub")
    assert code == 0, output
    assert read_document(document_file)[0].children[1].children[0].summary == "sub"

    code, output = _invoke(document_file, "delete", new_id)
    assert code == 0, output
    assert read_document(document_file)[0].children[1].children == ()


def test_failed_mutation_leaves_file_untouched(document_file: Path) -> None:
    before = document_file.read_text()

    code, output = _invoke(document_file, "delete", "root")
    assert code == 1
    assert "root node cannot be deleted" in output

    code, _ = _invoke(document_file, "add", "ghost", "--title", "X")
    assert code == 1
    assert document_file.read_text() == before


def test_move_accumulates_offset(document_file: Path) -> None:
    code, output = _invoke(document_file, "move", "b", "--dx", "5", "--dy", "5")
    assert code == 0, output
    assert "(20, 0)" in output
    assert read_document(document_file)[1] == {"b": Offset(20, 0)}


def test_reset_offsets(document_file: Path) -> None:
    code, _ = _invoke(document_file, "reset-offsets")
    assert code == 0
    assert read_document(document_file)[1] == {}


def test_layout_json_respects_collapse(document_file: Path) -> None:
    code, output = _invoke(document_file, "layout", "--collapse", "a", "--json")
    assert code == 0, output
    data = json.loads(output)
    ids = [n["id"] for n in data["nodes"]]
    assert ids == ["root", "a", "b", "c", "c1"]
    b = next(n for n in data["nodes"] if n["id"] == "b")
    assert (b["x"], b["y"]) == (15, 175)


def test_layout_text_marks_collapsed(document_file: Path) -> None:
    code, output = _invoke(document_file, "layout", "-c", "c")
    assert code == 0, output
    assert "Gamma [+]" in output
    assert "6 nodes, 5 edges" in output


def test_import_replaces_document(document_file: Path, tmp_path: Path) -> None:
    source = tmp_path / "other.json"
    source.write_text(json.dumps({"id": "x", "title": "Other"}))

    code, output = _invoke(document_file, "import", str(source))
    assert code == 0, output
    assert read_document(document_file)[0].title == "Other"


def test_invalid_import_keeps_document(document_file: Path, tmp_path: Path) -> None:
    source = tmp_path / "bad.json"
    source.write_text(json.dumps({"title": "X"}))
    before = document_file.read_text()

    code, output = _invoke(document_file, "import", str(source))
    assert code == 1
    assert "Error:" in output
    assert document_file.read_text() == before


def test_export_reports_unchanged(document_file: Path, tmp_path: Path) -> None:
    dest = tmp_path / "out.json"
    code, output = _invoke(document_file, "export", str(dest))
    assert code == 0
    assert "Exported to" in output
    assert read_document(dest) == read_document(document_file)

    code, output = _invoke(document_file, "export", str(dest))
    assert "already up to date" in output


def test_generate_uses_generator(document_file: Path) -> None:
    fake = FakeGenerator({"id": "root", "title": "Space", "children": []})
    with patch("mindmap_canvas.generator.ContentGenerator", return_value=fake):
        code, output = _invoke(document_file, "generate", "space", "--url", "http://x")
    assert code == 0, output
    assert fake.topics == ["space"]
    assert read_document(document_file)[0].title == "Space"


def test_generate_failure_keeps_document(document_file: Path) -> None:
    before = document_file.read_text()
    fake = FakeGenerator({"title": "no id"})
    with patch("mindmap_canvas.generator.ContentGenerator", return_value=fake):
        code, _ = _invoke(document_file, "generate", "space")
    assert code == 1
    assert document_file.read_text() == before


def test_generate_without_endpoint(document_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("mindmap_canvas.generator.GENERATOR_URL", None)
    code, output = _invoke(document_file, "generate", "space")
    assert code == 1
    assert "MINDMAP_GENERATOR_URL" in output


def test_export_to_directory_reports_error(document_file: Path, tmp_path: Path) -> None:
    code, output = _invoke(document_file, "export", str(tmp_path))
    assert code == 1
    assert "Error: Could not write" in output


def test_move_back_to_start_clears_offset(document_file: Path) -> None:
    code, output = _invoke(document_file, "move", "b", "--dx", "-15", "--dy", "5")
    assert code == 0, output
    assert "(0, 0)" in output
    assert read_document(document_file)[1] == {}
