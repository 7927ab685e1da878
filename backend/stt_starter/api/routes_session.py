"""Session token endpoint.

* GET /api/session - issue a JWT. When a session secret is configured the
  request must present a nonce from the page load in ``X-Session-Nonce``.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header

from ..config import Settings
from ..exceptions import AuthenticationError
from ..services.session import NonceStore, SessionIssuer
from .dependencies import get_nonce_store, get_session_issuer, get_settings

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
async def create_session(
    x_session_nonce: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
    nonces: NonceStore = Depends(get_nonce_store),
    issuer: SessionIssuer = Depends(get_session_issuer),
) -> dict:
    if settings.nonce_required and not nonces.consume(x_session_nonce):
        logger.warning("Session request rejected: missing or invalid nonce")
        raise AuthenticationError(
            "Valid session nonce required. Please refresh the page.",
            code="INVALID_NONCE",
            status_code=403,
        )
    return {"token": issuer.issue()}
