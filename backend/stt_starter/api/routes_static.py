"""Static frontend routes.

* GET /, /index.html  - ``index.html`` with the page config injected as meta
  tags: ``api-base``, ``transcription-route`` and, when the app can issue
  sessions, a fresh ``session-nonce``.
* GET /{path}         - any other file under ``STATIC_DIR``.

The router is mounted last so that every ``/api`` route takes precedence.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import FileResponse, HTMLResponse

from ..config import Settings
from ..services.session import NonceStore
from ..utils.static_files import INDEX_FILE, content_type_for, inject_meta, resolve_static_path
from .dependencies import get_optional_nonce_store, get_settings

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/", response_class=HTMLResponse)
@router.get(f"/{INDEX_FILE}", response_class=HTMLResponse, include_in_schema=False)
async def get_index(
    request: Request,
    settings: Settings = Depends(get_settings),
    nonces: Optional[NonceStore] = Depends(get_optional_nonce_store),
) -> HTMLResponse:
    index_path = resolve_static_path(settings.STATIC_DIR, "/")
    if index_path is None:
        logger.warning("index.html not found under %s", settings.STATIC_DIR)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    meta = {
        "api-base": request.app.state.api_base,
        "transcription-route": settings.TRANSCRIPTION_ROUTE,
    }
    if nonces is not None:
        nonces.sweep()
        meta["session-nonce"] = nonces.issue()
    html = index_path.read_text(encoding="utf-8")
    return HTMLResponse(content=inject_meta(html, meta))


@router.get("/{file_path:path}")
async def get_static_file(file_path: str, settings: Settings = Depends(get_settings)) -> FileResponse:
    resolved = resolve_static_path(settings.STATIC_DIR, file_path)
    if resolved is None:
        logger.info("Static file '%s' not found under %s", file_path, settings.STATIC_DIR)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return FileResponse(path=resolved, media_type=content_type_for(resolved))
