"""Configuration constants for mindmap-canvas."""

import os
from pathlib import Path

# Layout geometry, in world units.
NODE_WIDTH: float = 200.0
NODE_HEIGHT: float = 80.0
LEVEL_GAP: float = 180.0
SIBLING_GAP: float = 60.0

# View transform.
DEFAULT_SCALE: float = 0.8
MIN_SCALE: float = 0.3
MAX_SCALE: float = 2.0
ZOOM_IN_FACTOR: float = 1.2
ZOOM_OUT_FACTOR: float = 0.8
WHEEL_ZOOM_IN_FACTOR: float = 1.1
WHEEL_ZOOM_OUT_FACTOR: float = 0.9
# Distance of the root from the top of the container after a view reset.
# None centers the root vertically instead.
RESET_TOP_ANCHOR: float | None = 100.0

# Screen pixels a pointer may travel before a node press becomes a drag.
CLICK_THRESHOLD: float = 3.0

DEFAULT_DOCUMENT_NAME = "mindmap-data.json"

# Working document location. First file found is used.
DOCUMENT_CANDIDATES: list[Path] = [
    Path.cwd() / DEFAULT_DOCUMENT_NAME,
    Path("~/.local/share/mindmap-canvas").expanduser() / DEFAULT_DOCUMENT_NAME,
]

# Content generator endpoint. Unset disables generation.
GENERATOR_URL: str | None = os.environ.get("MINDMAP_GENERATOR_URL")

# Generator token location. First file found is used; a missing token is allowed.
GENERATOR_TOKEN_FILES: list[Path] = [
    Path("~/.config/mindmap-canvas-token.txt").expanduser(),
    Path("~/.config/secret/mindmap-canvas-token.txt").expanduser(),
]

GENERATOR_TIMEOUT: float = 60.0


def resolve_document_path() -> Path:
    """Return the working document path.

    ``MINDMAP_DOCUMENT`` wins when set; otherwise the first existing candidate,
    falling back to the first candidate so that ``new`` has somewhere to write.
    """
    env_path = os.environ.get("MINDMAP_DOCUMENT")
    if env_path:
        return Path(env_path).expanduser()
    for candidate in DOCUMENT_CANDIDATES:
        if candidate.is_file():
            return candidate
    return DOCUMENT_CANDIDATES[0]
