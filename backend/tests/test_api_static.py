import re
from pathlib import Path

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from stt_starter.main import create_app, create_frontend_app
from stt_starter.utils.static_files import content_type_for, inject_meta, resolve_static_path


def test_root_serves_index_with_nonce(client: TestClient, app):
    response = client.get("/")

    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"].startswith("text/html")
    assert '<meta name="session-nonce" content="' in response.text
    assert response.text.index("session-nonce") < response.text.index("</head>")
    assert len(app.state.nonce_store) == 1


@pytest.mark.parametrize(
    "path, content_type",
    [
        ("/style.css", "text/css"),
        ("/script.js", "application/javascript"),
        ("/logo.svg", "image/svg+xml"),
        ("/notes.md", "text/plain"),
        ("/index.html", "text/html"),
    ],
)
def test_static_content_types(client: TestClient, path, content_type):
    response = client.get(path)

    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"].split(";")[0] == content_type


def test_missing_file_is_404(client: TestClient):
    response = client.get("/nope.js")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_missing_index_is_404(client: TestClient, static_dir: Path):
    (static_dir / "index.html").unlink()
    assert client.get("/").status_code == status.HTTP_404_NOT_FOUND


def test_path_traversal_is_refused(static_dir: Path):
    (static_dir.parent / "secret.txt").write_text("top secret", encoding="utf-8")
    assert resolve_static_path(static_dir, "/../secret.txt") is None
    assert resolve_static_path(static_dir, "/style.css") == static_dir / "style.css"


def test_api_routes_take_precedence(client: TestClient):
    assert client.get("/api/health").json() == {"status": "ok"}


@pytest.mark.parametrize("name", ["INDEX.HTML", "a.CSS"])
def test_content_type_ignores_case(name):
    assert content_type_for(Path(name)) in {"text/html", "text/css"}


def meta_content(html: str, name: str):
    match = re.search(rf'<meta name="{name}" content="([^"]*)">', html)
    return match.group(1) if match else None


def test_index_html_path_gets_a_nonce_too(client: TestClient, app):
    response = client.get("/index.html")

    assert response.status_code == status.HTTP_200_OK
    assert meta_content(response.text, "session-nonce")
    assert len(app.state.nonce_store) == 1


def test_page_config_is_injected(client: TestClient):
    html = client.get("/").text

    assert meta_content(html, "api-base") == ""
    assert meta_content(html, "transcription-route") == "/api/transcription"


def test_page_follows_custom_transcription_route(settings, deepgram_client):
    settings.TRANSCRIPTION_ROUTE = "/stt/transcribe"
    client = TestClient(create_app(settings, deepgram_client=deepgram_client))

    assert meta_content(client.get("/").text, "transcription-route") == "/stt/transcribe"


def test_inject_meta_escapes_values():
    html = inject_meta("<head></head>", {"api-base": 'http://x/"><script>'})
    assert "<script>" not in html
    assert html.endswith("</head>")


def test_frontend_only_app(settings):
    client = TestClient(create_frontend_app(settings))

    assert client.get("/style.css").headers["content-type"].startswith("text/css")
    assert client.get("/api/session").status_code == status.HTTP_404_NOT_FOUND


def test_frontend_only_page_points_at_the_api_server(settings, deepgram_client):
    settings.HOST = "0.0.0.0"
    settings.PORT = 9001
    settings.API_BASE_URL = ""
    frontend = TestClient(create_frontend_app(settings))

    response = frontend.get("/")

    assert response.status_code == status.HTTP_200_OK
    assert meta_content(response.text, "api-base") == "http://localhost:9001"
    assert meta_content(response.text, "transcription-route") == "/api/transcription"
    # nonces from this server would never be accepted by the API server
    assert meta_content(response.text, "session-nonce") is None

    api = TestClient(create_app(settings, deepgram_client=deepgram_client))
    token = api.get("/api/session").json()["token"]
    result = api.post(
        "/api/transcription",
        data={"url": "http://x/audio.wav"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert result.status_code == status.HTTP_200_OK


def test_explicit_api_base_url_wins(settings):
    settings.API_BASE_URL = "https://stt.example.com/"
    html = TestClient(create_frontend_app(settings)).get("/").text
    assert meta_content(html, "api-base") == "https://stt.example.com"
