"""FastAPI dependency providers.

Shared collaborators live on ``app.state`` (set up by the app factory); the
providers below hand them to the routes and can be replaced through
``app.dependency_overrides`` in tests.
"""

from typing import Optional

from fastapi import Depends, Header, Request

from ..config import Settings
from ..exceptions import AuthenticationError
from ..services.deepgram import DeepgramClient
from ..services.session import NonceStore, SessionIssuer

BEARER_PREFIX = "Bearer "


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_deepgram_client(request: Request) -> DeepgramClient:
    return request.app.state.deepgram_client


def get_nonce_store(request: Request) -> NonceStore:
    return request.app.state.nonce_store


def get_optional_nonce_store(request: Request) -> Optional[NonceStore]:
    """The frontend-only app has no nonce store; it cannot issue sessions."""
    return getattr(request.app.state, "nonce_store", None)


def get_session_issuer(request: Request) -> SessionIssuer:
    return request.app.state.session_issuer


def require_session_token(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
    issuer: SessionIssuer = Depends(get_session_issuer),
) -> None:
    """Reject the request unless it carries a valid ``Bearer`` session token."""
    if not settings.REQUIRE_AUTH:
        return
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise AuthenticationError(
            "Authorization header with Bearer token is required",
            code="MISSING_TOKEN",
        )
    if not issuer.validate(authorization[len(BEARER_PREFIX):]):
        raise AuthenticationError(
            "Invalid or expired session token",
            code="INVALID_TOKEN",
        )
