from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
FRONTEND_DIR = PROJECT_ROOT / "frontend"


def test_index_html_exists():
    index_path = FRONTEND_DIR / "index.html"
    assert index_path.is_file(), f"{index_path} should exist"


def test_index_references_assets():
    index_path = FRONTEND_DIR / "index.html"
    html = index_path.read_text(encoding="utf-8")
    assert "style.css" in html, "style.css link missing"
    assert "script.js" in html, "script.js script tag missing"
    assert "</head>" in html, "</head> needed for session nonce injection"


def test_script_uses_session_nonce_and_bearer_token():
    script = (FRONTEND_DIR / "script.js").read_text(encoding="utf-8")
    assert "session-nonce" in script
    assert "X-Session-Nonce" in script
    assert "Bearer" in script


def test_metadata_file_has_meta_section():
    toml_text = (PROJECT_ROOT / "deepgram.toml").read_text(encoding="utf-8")
    assert "[meta]" in toml_text


def test_script_reads_injected_page_config():
    script = (FRONTEND_DIR / "script.js").read_text(encoding="utf-8")
    assert "api-base" in script
    assert "transcription-route" in script
    assert '"/api/transcription"' in script, "same-origin default route missing"
