"""Thin async client for the Deepgram pre-recorded REST API.

Two calls are exposed, mirroring the two upload paths of the API:

* :meth:`DeepgramClient.transcribe_url`  - Deepgram fetches the audio itself.
* :meth:`DeepgramClient.transcribe_file` - raw bytes are posted in the body.

Both POST to ``{base_url}/v1/listen`` with the transcription options encoded
as query parameters and return the decoded JSON payload. Every failure is
raised as :class:`~stt_starter.exceptions.DeepgramError`; nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from ..exceptions import DeepgramError

logger = logging.getLogger(__name__)

LISTEN_PATH = "/v1/listen"
DEFAULT_MIME_TYPE = "application/octet-stream"


def encode_options(options: Mapping[str, Any]) -> Dict[str, str]:
    """Render option values the way Deepgram expects them in a query string."""
    params: Dict[str, str] = {}
    for key, value in options.items():
        if value is None:
            continue
        if isinstance(value, bool):
            params[key] = "true" if value else "false"
        else:
            params[key] = str(value)
    return params


class DeepgramClient:
    """Minimal Deepgram ``/v1/listen`` client built on :class:`httpx.AsyncClient`."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.deepgram.com",
        timeout: Optional[float] = 300.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    @property
    def listen_url(self) -> str:
        return f"{self._base_url}{LISTEN_PATH}"

    def _headers(self, content_type: str) -> Dict[str, str]:
        return {
            "Authorization": f"Token {self._api_key}",
            "Content-Type": content_type,
            "Accept": "application/json",
        }

    async def transcribe_url(self, url: str, options: Mapping[str, Any]) -> Dict[str, Any]:
        logger.info("Requesting Deepgram transcription for URL %s", url)
        return await self._post(
            options,
            json={"url": url},
            headers=self._headers("application/json"),
        )

    async def transcribe_file(
        self, data: bytes, mime_type: Optional[str], options: Mapping[str, Any]
    ) -> Dict[str, Any]:
        logger.info("Requesting Deepgram transcription for %d uploaded bytes (%s)", len(data), mime_type)
        return await self._post(
            options,
            content=data,
            headers=self._headers(mime_type or DEFAULT_MIME_TYPE),
        )

    async def _post(self, options: Mapping[str, Any], **kwargs: Any) -> Dict[str, Any]:
        params = encode_options(options)
        try:
            response = await self._http.post(self.listen_url, params=params, **kwargs)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.error("Deepgram request timed out: %s", exc)
            raise DeepgramError(f"Deepgram request timed out: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            body = exc.response.text
            logger.error("Deepgram returned HTTP %s: %s", exc.response.status_code, body)
            raise DeepgramError(
                f"Deepgram returned HTTP {exc.response.status_code}: {_error_message(exc.response)}",
                status_code=exc.response.status_code,
                body=body,
            ) from exc
        except httpx.RequestError as exc:
            logger.error("Could not reach Deepgram at %s: %s", self.listen_url, exc)
            raise DeepgramError(f"Could not reach Deepgram: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise DeepgramError("Deepgram returned a non-JSON response") from exc
        if payload is None:
            raise DeepgramError("Deepgram returned null response")
        return payload

    async def aclose(self) -> None:
        await self._http.aclose()


def _error_message(response: httpx.Response) -> str:
    """Best-effort extraction of Deepgram's ``err_msg`` from an error body."""
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(data, dict):
        return str(data.get("err_msg") or data.get("message") or data)
    return str(data)
