"""ASGI entry-point for the FastAPI application.

This module
1. builds the :class:`fastapi.FastAPI` application in :func:`create_app`;
2. wires the API routers located in ``stt_starter.api`` and, last, the
   static frontend router;
3. registers global exception handlers and middleware; and
4. owns the lifespan of the shared collaborators (Deepgram HTTP client,
   nonce sweeper task).

Run it with ``uvicorn --factory stt_starter.main:create_app`` or through the
``stt-starter`` console script.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import routes_metadata, routes_session, routes_static, routes_transcription
from .config import Settings, load_settings, require_api_key
from .exceptions import ApiError
from .logging_config import setup_logging
from .services.deepgram import DeepgramClient
from .services.session import NonceStore, SessionIssuer, sweep_nonces_forever
from .services.transcription import TranscriptionBackend

logger = logging.getLogger(__name__)


def _log_banner(settings: Settings) -> None:
    nonce_status = " (nonce required)" if settings.nonce_required else ""
    auth_status = " (auth required)" if settings.REQUIRE_AUTH else ""
    logger.info("=" * 70)
    logger.info("Backend API Server running at http://%s:%d", settings.HOST, settings.PORT)
    logger.info("CORS enabled for origins: %s", ", ".join(settings.cors_origins))
    logger.info("GET  /api/session%s", nonce_status)
    logger.info("POST %s%s", settings.TRANSCRIPTION_ROUTE, auth_status)
    logger.info("GET  /api/metadata")
    logger.info("=" * 70)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings
    _log_banner(settings)

    sweeper = asyncio.create_task(
        sweep_nonces_forever(app.state.nonce_store, settings.NONCE_SWEEP_INTERVAL_SECONDS)
    )
    try:
        yield
    finally:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper
        if app.state.owns_deepgram_client:
            await app.state.deepgram_client.aclose()
        logger.info("Shutdown complete.")


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def _api_error_handler(  # noqa: D401
        _request: Request,
        exc: ApiError,
    ) -> JSONResponse:
        logger.error("%s %s (%s): %s", exc.error_type, exc.code, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_envelope())

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(  # noqa: D401
        _request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        logger.error("Request validation error: %s", exc.errors())
        body = {
            "error": {
                "type": "ValidationError",
                "code": "INVALID_REQUEST",
                "message": "Request validation failed",
                "details": {"errors": jsonable_encoder(exc.errors())},
            }
        }
        return JSONResponse(status_code=422, content=body)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(  # noqa: D401
        _request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        logger.info("HTTP exception %s: %s", exc.status_code, exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(Exception)
    async def _generic_error_handler(  # noqa: D401
        _request: Request,
        exc: Exception,
    ) -> JSONResponse:
        logger.exception("Unhandled exception: %s", exc)
        return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


def create_app(
    settings: Optional[Settings] = None,
    deepgram_client: Optional[TranscriptionBackend] = None,
) -> FastAPI:
    """Wire and return the FastAPI application instance.

    Raises:
        MissingApiKeyError: if no Deepgram client is given and
            ``DEEPGRAM_API_KEY`` is not configured.
    """
    if settings is None:
        settings = load_settings()
        setup_logging(settings.LOG_DIR, settings.LOG_LEVEL)

    owns_client = deepgram_client is None
    if deepgram_client is None:
        deepgram_client = DeepgramClient(
            api_key=require_api_key(settings),
            base_url=settings.DEEPGRAM_API_URL,
            timeout=settings.DEEPGRAM_TIMEOUT_SECONDS,
        )

    app = FastAPI(
        title="Deepgram STT Starter API",
        version="0.1.0",
        docs_url="/api/docs",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.deepgram_client = deepgram_client
    app.state.owns_deepgram_client = owns_client
    # The page is served by this app, so API calls stay same-origin.
    app.state.api_base = ""
    app.state.nonce_store = NonceStore(ttl_seconds=settings.NONCE_TTL_SECONDS)
    app.state.session_issuer = SessionIssuer(
        settings.signing_secret, ttl_seconds=settings.SESSION_TOKEN_TTL_SECONDS
    )

    _register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(
        routes_transcription.router,
        prefix=settings.TRANSCRIPTION_ROUTE.rstrip("/"),
        tags=["transcription"],
    )
    app.include_router(routes_session.router, prefix="/api/session", tags=["session"])
    app.include_router(routes_metadata.router, prefix="/api/metadata", tags=["metadata"])

    @app.get("/api/health")
    async def _health() -> dict[str, str]:  # noqa: D401
        return {"status": "ok"}

    # Catch-all static routes must come last.
    app.include_router(routes_static.router, tags=["frontend"])

    return app


def create_frontend_app(settings: Optional[Settings] = None) -> FastAPI:
    """A static-only application serving the frontend on its own port.

    The page is pointed at the API server through the ``api-base`` meta tag.
    Nonces are not issued here: they are only valid on the API server that
    issued them, so with ``SESSION_SECRET`` set use the API server's own page.
    """
    if settings is None:
        settings = load_settings()
        setup_logging(settings.LOG_DIR, settings.LOG_LEVEL)

    app = FastAPI(title="Deepgram STT Starter Frontend", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.settings = settings
    app.state.api_base = settings.api_base_url

    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(  # noqa: D401
        _request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    app.include_router(routes_static.router)
    return app
