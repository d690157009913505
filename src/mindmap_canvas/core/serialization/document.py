"""Export and import self-contained mindmap documents.

A document is the Node shape as plain JSON with a ``manualOffset`` object on
every node. Offsets are view state: import splits them back out into an
offset map and never stores them on the Node.
"""

import json
import math
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from loguru import logger

from mindmap_canvas.errors import InvalidFormatError, StorageError
from mindmap_canvas.models.node import ZERO_OFFSET, Node, Offset

OFFSET_KEY = "manualOffset"


def _node_to_dict(node: Node, offsets: Mapping[str, Offset]) -> dict[str, Any]:
    offset = offsets.get(node.id, ZERO_OFFSET)
    data: dict[str, Any] = {
        "id": node.id,
        "title": node.title,
        "summary": node.summary,
    }
    if node.description is not None:
        data["description"] = node.description
    if node.notes is not None:
        data["notes"] = node.notes
    data["children"] = [_node_to_dict(child, offsets) for child in node.children]
    data[OFFSET_KEY] = {"dx": offset.dx, "dy": offset.dy}
    return data


def export_document(root: Node, offsets: Mapping[str, Offset] | None = None) -> dict[str, Any]:
    """Merge the tree with its manual offsets into one plain-data document."""
    return _node_to_dict(root, offsets or {})


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value)


def _optional_str(raw: dict[str, Any], key: str, where: str) -> str | None:
    value = raw.get(key)
    if value is not None and not isinstance(value, str):
        msg = f"Field '{key}' of {where} must be a string."
        raise InvalidFormatError(msg)
    return value


def _parse_offset(raw: Any, where: str) -> Offset:
    if not isinstance(raw, dict):
        msg = f"'{OFFSET_KEY}' of {where} must be an object."
        raise InvalidFormatError(msg)
    dx = raw.get("dx", 0)
    dy = raw.get("dy", 0)
    if not (_is_number(dx) and _is_number(dy)):
        msg = f"'{OFFSET_KEY}' of {where} needs finite numeric dx and dy."
        raise InvalidFormatError(msg)
    return Offset(float(dx), float(dy))


def _parse_node(raw: Any, seen: set[str], offsets: dict[str, Offset]) -> Node:
    if not isinstance(raw, dict):
        msg = f"Expected a node object, got {type(raw).__name__}."
        raise InvalidFormatError(msg)

    node_id = raw.get("id")
    if not isinstance(node_id, str) or not node_id:
        msg = "Every node needs a string 'id'."
        raise InvalidFormatError(msg)
    if node_id in seen:
        msg = f"Duplicate node id '{node_id}'."
        raise InvalidFormatError(msg)
    seen.add(node_id)

    where = f"node '{node_id}'"
    raw_children = raw.get("children", [])
    if not isinstance(raw_children, list):
        msg = f"'children' of {where} must be a list."
        raise InvalidFormatError(msg)

    if OFFSET_KEY in raw:
        offset = _parse_offset(raw[OFFSET_KEY], where)
        if not offset.is_zero:
            offsets[node_id] = offset

    return Node(
        id=node_id,
        title=_optional_str(raw, "title", where) or "",
        summary=_optional_str(raw, "summary", where) or "",
        description=_optional_str(raw, "description", where),
        notes=_optional_str(raw, "notes", where),
        children=tuple(_parse_node(child, seen, offsets) for child in raw_children),
    )


def import_document(doc: Any) -> tuple[Node, dict[str, Offset]]:
    """Split a document into a tree and an offset map.

    The top-level object must carry string ``id`` and ``title`` fields.
    ``children`` defaults to empty and ``manualOffset`` to zero; unknown keys
    are ignored.

    Raises:
        InvalidFormatError: The document fails shape validation.
    """
    if not isinstance(doc, dict):
        msg = "Document must be a JSON object."
        raise InvalidFormatError(msg)
    if not isinstance(doc.get("id"), str) or not isinstance(doc.get("title"), str):
        msg = "Document needs top-level string 'id' and 'title' fields."
        raise InvalidFormatError(msg)

    offsets: dict[str, Offset] = {}
    try:
        root = _parse_node(doc, set(), offsets)
    except RecursionError as e:
        msg = "Document nests too deeply."
        raise InvalidFormatError(msg) from e
    logger.debug("Imported document '{}' ({} manual offsets)", root.id, len(offsets))
    return root, offsets


def dumps_document(root: Node, offsets: Mapping[str, Offset] | None = None) -> str:
    doc = export_document(root, offsets)
    return json.dumps(doc, indent=2, ensure_ascii=False, allow_nan=False) + "\n"


def loads_document(text: str) -> tuple[Node, dict[str, Offset]]:
    """Parse JSON text and import it.

    Raises:
        InvalidFormatError: The text is not JSON or fails shape validation.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        msg = f"Could not parse JSON: {e}"
        raise InvalidFormatError(msg) from e
    except RecursionError as e:
        msg = "Document nests too deeply."
        raise InvalidFormatError(msg) from e
    return import_document(data)


def read_document(path: Path) -> tuple[Node, dict[str, Offset]]:
    """Read and import a document file.

    Raises:
        InvalidFormatError: The file cannot be read, parsed or validated.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        msg = f"Could not read '{path}': {e}"
        raise InvalidFormatError(msg) from e
    return loads_document(text)


def write_document(path: Path, root: Node, offsets: Mapping[str, Offset] | None = None) -> bool:
    """Export to path. Returns False when the file already had these contents.

    Raises:
        StorageError: The file cannot be written.
    """
    contents = dumps_document(root, offsets)
    try:
        if path.read_text(encoding="utf-8") == contents:
            logger.debug("Unchanged: {}", path)
            return False
    except (OSError, UnicodeDecodeError):
        # Missing or unreadable; a real problem surfaces on write
        pass

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(contents, encoding="utf-8")
    except OSError as e:
        msg = f"Could not write '{path}': {e}"
        raise StorageError(msg) from e
    logger.debug("Wrote {}", path)
    return True
