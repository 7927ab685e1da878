"""Session tokens and single-use page nonces.

* :class:`NonceStore` - thread-safe TTL registry of nonces. A nonce is issued
  when ``GET /`` renders the page and can be redeemed exactly once by
  ``GET /api/session`` before it expires.
* :class:`SessionIssuer` - issues and validates HS256 JWTs with a fixed
  lifetime and no clock-skew allowance.
* :func:`sweep_nonces_forever` - background task evicting expired nonces.

Both objects are created by the app factory and handed to the routes via
FastAPI dependencies.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

import jwt

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"


class NonceStore:
    """Lock-protected mapping of nonce -> expiry timestamp (seconds)."""

    def __init__(self, ttl_seconds: int = 300, clock: Callable[[], float] = time.time) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._nonces: Dict[str, float] = {}

    def issue(self) -> str:
        nonce = secrets.token_hex(16)
        with self._lock:
            self._nonces[nonce] = self._clock() + self.ttl_seconds
        return nonce

    def consume(self, nonce: Optional[str]) -> bool:
        """Redeem ``nonce``. True only for a known, unexpired, unused nonce."""
        if not nonce:
            return False
        with self._lock:
            expiry = self._nonces.pop(nonce, None)
        if expiry is None:
            return False
        return self._clock() < expiry

    def sweep(self) -> int:
        """Drop expired nonces and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [nonce for nonce, expiry in self._nonces.items() if now >= expiry]
            for nonce in expired:
                del self._nonces[nonce]
        if expired:
            logger.debug("Evicted %d expired session nonces", len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._nonces)


class SessionIssuer:
    """Issues and validates short-lived signed bearer tokens."""

    def __init__(self, secret: str, ttl_seconds: int = 3600) -> None:
        self._secret = secret
        self.ttl_seconds = ttl_seconds

    def issue(self, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        claims = {
            "iat": issued_at,
            "exp": issued_at + timedelta(seconds=self.ttl_seconds),
        }
        return jwt.encode(claims, self._secret, algorithm=JWT_ALGORITHM)

    def validate(self, token: str) -> bool:
        try:
            jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": ["exp"]},
                leeway=0,
            )
        except jwt.ExpiredSignatureError:
            logger.info("Rejected expired session token")
            return False
        except jwt.InvalidTokenError as exc:
            logger.info("Rejected invalid session token: %s", exc)
            return False
        return True


async def sweep_nonces_forever(store: NonceStore, interval_seconds: float) -> None:
    """Evict expired nonces every ``interval_seconds`` until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        store.sweep()
