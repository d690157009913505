"""HTTP client for the generative content collaborator."""

from typing import Any

import requests
from loguru import logger

from mindmap_canvas.config import GENERATOR_TIMEOUT, GENERATOR_TOKEN_FILES, GENERATOR_URL
from mindmap_canvas.errors import ExternalFailureError

REQUIRED_FIELDS = ("id", "title", "children")


class ContentGenerator:
    """Fetch Node-shaped documents for a topic from a remote endpoint."""

    def __init__(self, url: str | None = None, *, timeout: float = GENERATOR_TIMEOUT) -> None:
        self.url = url or GENERATOR_URL
        if not self.url:
            msg = "No generator endpoint configured (set MINDMAP_GENERATOR_URL)."
            raise ExternalFailureError(msg)
        self.timeout = timeout
        self.sess = requests.Session()

        self.token: str | None = None
        token_name: str | None = None
        for token_path in GENERATOR_TOKEN_FILES:
            try:
                self.token = token_path.read_text(encoding="utf-8").strip()
                token_name = str(token_path)
                break
            except FileNotFoundError:
                pass

        logger.debug("Generator ready: url {!r}, token from {!r}", self.url, token_name)

    def generate(self, topic: str) -> dict[str, Any]:
        """Request a mindmap document for topic.

        Raises:
            ExternalFailureError: The request failed or the reply is not a JSON object.
        """
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        logger.debug("Requesting mindmap for topic {!r}", topic[:32])
        try:
            r = self.sess.post(
                self.url, json={"topic": topic}, headers=headers, timeout=self.timeout
            )
            r.raise_for_status()
            data = r.json()
        except requests.RequestException as e:
            msg = f"Generator request failed: {e}"
            raise ExternalFailureError(msg) from e
        except ValueError as e:
            msg = f"Generator returned invalid JSON: {e}"
            raise ExternalFailureError(msg) from e

        if not isinstance(data, dict):
            msg = f"Generator returned {type(data).__name__}, expected an object."
            raise ExternalFailureError(msg)
        return data


def validate_generated_document(doc: Any) -> None:
    """Check the minimum shape of a generated document.

    Raises:
        ExternalFailureError: A required top-level field is missing.
    """
    if not isinstance(doc, dict):
        msg = "Generated content is not a JSON object."
        raise ExternalFailureError(msg)
    missing = [key for key in REQUIRED_FIELDS if key not in doc]
    if missing:
        msg = f"Generated content is missing {', '.join(missing)}."
        raise ExternalFailureError(msg)
