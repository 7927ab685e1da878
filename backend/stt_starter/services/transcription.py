"""Transcription request normaliser.

The transcription endpoint is a single linear pipeline::

    validate -> build options -> dispatch (URL xor bytes) -> normalise

Each stage lives here as a plain function so it can be tested on its own;
the router only parses the form and owns the catch-all error exit.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple

import pydantic

from ..exceptions import TranscriptionError, ValidationError
from ..models.deepgram import DeepgramResponse
from ..models.transcription import (
    TranscriptionMetadata,
    TranscriptionRequest,
    TranscriptionResult,
    WordEntry,
)
from .features import apply_features, parse_features

logger = logging.getLogger(__name__)

MISSING_INPUT_MESSAGE = "Either file or url must be provided"


class Upload(Protocol):
    """What we need from an uploaded file (e.g. :class:`fastapi.UploadFile`)."""

    content_type: Optional[str]

    async def read(self) -> bytes: ...


class TranscriptionBackend(Protocol):
    async def transcribe_url(self, url: str, options: Mapping[str, Any]) -> Dict[str, Any]: ...

    async def transcribe_file(
        self, data: bytes, mime_type: Optional[str], options: Mapping[str, Any]
    ) -> Dict[str, Any]: ...


async def validate_transcription_input(
    url: Optional[str], file: Optional[Upload]
) -> Tuple[Optional[str], Optional[bytes], Optional[str]]:
    """Return ``(url, file_bytes, mime_type)`` with exactly one source set.

    A non-empty URL wins even when a file was uploaded too; the file is then
    never read. Empty uploads count as absent.
    """
    if url:
        return url, None, None

    if file is not None:
        data = await file.read()
        if data:
            return None, data, file.content_type

    raise ValidationError(
        MISSING_INPUT_MESSAGE,
        code="MISSING_INPUT",
        details={"originalError": MISSING_INPUT_MESSAGE},
    )


def build_options(request: TranscriptionRequest) -> Dict[str, Any]:
    """Translate a validated request into Deepgram request options."""
    options: Dict[str, Any] = {"model": request.model}
    if request.tier and request.tier != "undefined":
        options["tier"] = request.tier
    apply_features(options, request.feature_flags)
    return options


async def dispatch(
    client: TranscriptionBackend, request: TranscriptionRequest, options: Mapping[str, Any]
) -> Dict[str, Any]:
    """Make exactly one vendor call, by URL or by uploaded bytes."""
    if request.url is not None:
        return await client.transcribe_url(request.url, options)
    return await client.transcribe_file(request.file_bytes, request.mime_type, options)


def format_transcription_response(payload: Mapping[str, Any], model_name: str) -> TranscriptionResult:
    """Reshape Deepgram's response into the stable API contract.

    ``model_name`` is the model that was *requested*, which is what we report
    back regardless of what Deepgram resolved it to.
    """
    try:
        response = DeepgramResponse.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise TranscriptionError(
            "Unexpected response shape from Deepgram",
            details={"originalError": str(exc)},
        ) from exc

    alternative = response.first_alternative()
    if alternative is None:
        message = "No transcription results returned from Deepgram"
        raise TranscriptionError(message, details={"originalError": message})

    words = [
        WordEntry(
            word=w.word,
            start=w.start,
            end=w.end,
            confidence=w.confidence,
            punctuated_word=w.punctuated_word if w.punctuated_word is not None else w.word,
        )
        for w in alternative.words
    ]

    metadata = response.metadata
    model_uuid = None
    request_id = None
    duration = None
    if metadata is not None:
        model_uuid = next(iter(metadata.model_info), None)
        request_id = metadata.request_id
        if metadata.duration is not None and metadata.duration > 0:
            duration = metadata.duration

    return TranscriptionResult(
        transcript=alternative.transcript or "",
        words=words,
        metadata=TranscriptionMetadata(
            model_uuid=model_uuid,
            request_id=request_id,
            model_name=model_name,
        ),
        duration=duration,
    )


async def transcribe(
    client: TranscriptionBackend,
    *,
    url: Optional[str],
    file: Optional[Upload],
    model: str,
    tier: Optional[str] = None,
    feature_flags: Optional[Mapping[str, Any]] = None,
    features: Optional[str] = None,
) -> TranscriptionResult:
    """Run the whole pipeline for one request.

    Flags come either already decoded (``feature_flags``) or as the raw JSON
    form field (``features``), which is only decoded once the input is valid.
    """
    source_url, file_bytes, mime_type = await validate_transcription_input(url, file)
    if feature_flags is None:
        feature_flags = parse_features(features)
    request = TranscriptionRequest(
        url=source_url,
        file_bytes=file_bytes,
        mime_type=mime_type,
        model=model,
        tier=tier,
        feature_flags=dict(feature_flags or {}),
    )
    options = build_options(request)
    logger.info("Transcribing %s source with options %s", request.source, options)

    payload = await dispatch(client, request, options)
    result = format_transcription_response(payload, model)
    logger.info(
        "Transcription finished: request_id=%s words=%d",
        result.metadata.request_id,
        len(result.words),
    )
    return result
