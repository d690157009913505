"""Tests for ContentGenerator, the HTTP client for generated mindmaps."""

from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
import requests

from mindmap_canvas.errors import ExternalFailureError
from mindmap_canvas.generator import ContentGenerator, validate_generated_document

URL = "https://generator.example/mindmap"


@pytest.fixture
def generator_with_mock_session(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> tuple[ContentGenerator, MagicMock]:
    """Create a ContentGenerator with a real token file and mocked requests.Session."""
    token_file = tmp_path / "token.txt"
    token_file.write_text("test-token\n")
    monkeypatch.setattr("mindmap_canvas.generator.GENERATOR_TOKEN_FILES", [token_file])

    with patch("mindmap_canvas.generator.requests.Session") as mock_session_cls:
        mock_session = MagicMock()
        mock_session_cls.return_value = mock_session
        generator = ContentGenerator(URL)

    return generator, mock_session


def _make_response(data: Any) -> MagicMock:
    response = MagicMock()
    response.json.return_value = data
    return response


def test_init_reads_token_from_first_found_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    token_file = tmp_path / "token.txt"
    token_file.write_text("my-secret-token\n")
    monkeypatch.setattr(
        "mindmap_canvas.generator.GENERATOR_TOKEN_FILES",
        [tmp_path / "missing.txt", token_file],
    )

    with patch("mindmap_canvas.generator.requests.Session"):
        generator = ContentGenerator(URL)

    assert generator.token == "my-secret-token"


def test_init_without_token_file_is_allowed(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr("mindmap_canvas.generator.GENERATOR_TOKEN_FILES", [tmp_path / "a.txt"])
    with patch("mindmap_canvas.generator.requests.Session"):
        generator = ContentGenerator(URL)
    assert generator.token is None


def test_init_without_url_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    """An unconfigured endpoint is an external failure, not a crash later on."""
    monkeypatch.setattr("mindmap_canvas.generator.GENERATOR_URL", None)
    with pytest.raises(ExternalFailureError, match="MINDMAP_GENERATOR_URL"):
        ContentGenerator()


def test_init_falls_back_to_configured_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("mindmap_canvas.generator.GENERATOR_URL", URL)
    monkeypatch.setattr("mindmap_canvas.generator.GENERATOR_TOKEN_FILES", [])
    with patch("mindmap_canvas.generator.requests.Session"):
        assert ContentGenerator().url == URL


def test_generate_posts_topic_with_bearer_token(
    generator_with_mock_session: tuple[ContentGenerator, MagicMock],
) -> None:
    generator, mock_session = generator_with_mock_session
    doc = {"id": "root", "title": "Space", "children": []}
    mock_session.post.return_value = _make_response(doc)

    assert generator.generate("space") == doc

    call_args = mock_session.post.call_args
    assert call_args.args == (URL,)
    assert call_args.kwargs["json"] == {"topic": "space"}
    assert call_args.kwargs["headers"] == {"Authorization": "Bearer test-token"}
    assert call_args.kwargs["timeout"] == generator.timeout


def test_generate_wraps_http_errors(
    generator_with_mock_session: tuple[ContentGenerator, MagicMock],
) -> None:
    generator, mock_session = generator_with_mock_session
    response = _make_response({})
    response.raise_for_status.side_effect = requests.HTTPError("503 Server Error")
    mock_session.post.return_value = response

    with pytest.raises(ExternalFailureError, match="503"):
        generator.generate("space")


def test_generate_wraps_connection_errors(
    generator_with_mock_session: tuple[ContentGenerator, MagicMock],
) -> None:
    generator, mock_session = generator_with_mock_session
    mock_session.post.side_effect = requests.ConnectionError("refused")

    with pytest.raises(ExternalFailureError, match="request failed"):
        generator.generate("space")


def test_generate_rejects_non_json_reply(
    generator_with_mock_session: tuple[ContentGenerator, MagicMock],
) -> None:
    generator, mock_session = generator_with_mock_session
    response = MagicMock()
    response.json.side_effect = ValueError("Expecting value")
    mock_session.post.return_value = response

    with pytest.raises(ExternalFailureError, match="invalid JSON"):
        generator.generate("space")


def test_generate_rejects_non_object_reply(
    generator_with_mock_session: tuple[ContentGenerator, MagicMock],
) -> None:
    generator, mock_session = generator_with_mock_session
    mock_session.post.return_value = _make_response(["a", "b"])

    with pytest.raises(ExternalFailureError, match="expected an object"):
        generator.generate("space")


def test_validate_reports_missing_fields() -> None:
    with pytest.raises(ExternalFailureError, match="title, children"):
        validate_generated_document({"id": "root"})
    validate_generated_document({"id": "root", "title": "T", "children": []})
