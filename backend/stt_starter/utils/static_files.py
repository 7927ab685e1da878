"""Filesystem helpers for the static frontend."""

import html
from pathlib import Path
from typing import Mapping, Optional

CONTENT_TYPES = {
    ".html": "text/html",
    ".css": "text/css",
    ".svg": "image/svg+xml",
    ".js": "application/javascript",
}
DEFAULT_CONTENT_TYPE = "text/plain"
INDEX_FILE = "index.html"


def content_type_for(path: Path) -> str:
    """Content type by (case-insensitive) extension, ``text/plain`` otherwise."""
    return CONTENT_TYPES.get(path.suffix.lower(), DEFAULT_CONTENT_TYPE)


def is_safe_path(basedir: Path, path_to_check: Path) -> bool:
    try:
        return path_to_check.resolve().is_relative_to(basedir.resolve())
    except (OSError, RuntimeError):  # symlink loops and the like
        return False


def resolve_static_path(root: Path, request_path: str) -> Optional[Path]:
    """Map a URL path onto an existing file under ``root``.

    ``/`` (and the empty path) map to ``index.html``. Returns ``None`` when
    the file does not exist or would escape ``root``.
    """
    relative = request_path.lstrip("/") or INDEX_FILE
    candidate = root / relative
    if not is_safe_path(root, candidate):
        return None
    if not candidate.is_file():
        return None
    return candidate


def inject_meta(page: str, meta: Mapping[str, str]) -> str:
    """Add one ``<meta name=... content=...>`` tag per entry right before ``</head>``."""
    tags = "".join(
        f'<meta name="{html.escape(name)}" content="{html.escape(content)}">\n' for name, content in meta.items()
    )
    return page.replace("</head>", f"{tags}</head>", 1)
