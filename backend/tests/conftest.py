import os
from pathlib import Path
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

# Never let a developer's .env or shell leak a real key into the tests
os.environ.setdefault("DEEPGRAM_API_KEY", "test-key")

from stt_starter.config import Settings  # noqa: E402
from stt_starter.main import create_app  # noqa: E402

INDEX_HTML = """<!DOCTYPE html>
<html>
<head>
  <title>Starter</title>
</head>
<body><script src="script.js"></script></body>
</html>
"""

META_TOML = """[meta]
title = "Python Transcription Starter"
language = "Python"
"""


def deepgram_payload(
    transcript: Optional[str] = "hello world",
    words: Optional[List[Dict[str, Any]]] = None,
    duration: Optional[float] = 1.5,
    request_id: Optional[str] = "req-123",
    model_uuid: Optional[str] = "uuid-abc",
) -> Dict[str, Any]:
    """A trimmed-down Deepgram ``/v1/listen`` response."""
    if words is None:
        words = [
            {"word": "hello", "start": 0.1, "end": 0.5, "confidence": 0.98, "punctuated_word": "Hello"},
            {"word": "world", "start": 0.6, "end": 1.0, "confidence": 0.95, "punctuated_word": "world."},
        ]
    metadata: Dict[str, Any] = {"request_id": request_id, "model_info": {}}
    if model_uuid:
        metadata["model_info"] = {model_uuid: {"name": "general-nova-3", "version": "2024-12-20.0"}}
    if duration is not None:
        metadata["duration"] = duration
    return {
        "metadata": metadata,
        "results": {
            "channels": [
                {"alternatives": [{"transcript": transcript, "confidence": 0.97, "words": words}]}
            ]
        },
    }


@pytest.fixture
def static_dir(tmp_path: Path) -> Path:
    root = tmp_path / "frontend"
    root.mkdir()
    (root / "index.html").write_text(INDEX_HTML, encoding="utf-8")
    (root / "style.css").write_text("body { margin: 0; }", encoding="utf-8")
    (root / "script.js").write_text("console.log('hi');", encoding="utf-8")
    (root / "logo.svg").write_text("<svg></svg>", encoding="utf-8")
    (root / "notes.md").write_text("# notes", encoding="utf-8")
    return root


@pytest.fixture
def metadata_file(tmp_path: Path) -> Path:
    path = tmp_path / "deepgram.toml"
    path.write_text(META_TOML, encoding="utf-8")
    return path


@pytest.fixture
def settings(tmp_path: Path, static_dir: Path, metadata_file: Path) -> Settings:
    return Settings(
        DEEPGRAM_API_KEY="test-key",
        SESSION_SECRET=None,
        REQUIRE_AUTH=True,
        TRANSCRIPTION_ROUTE="/api/transcription",
        CORS_ORIGINS="*",
        STATIC_DIR=static_dir,
        METADATA_FILE=metadata_file,
        LOG_DIR=tmp_path / "logs",
    )


@pytest.fixture
def deepgram_client() -> MagicMock:
    client = MagicMock()
    client.transcribe_url = AsyncMock(return_value=deepgram_payload())
    client.transcribe_file = AsyncMock(return_value=deepgram_payload())
    return client


@pytest.fixture
def app(settings: Settings, deepgram_client: MagicMock):
    return create_app(settings, deepgram_client=deepgram_client)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth_headers(app) -> Dict[str, str]:
    token = app.state.session_issuer.issue()
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_payload():
    return deepgram_payload
