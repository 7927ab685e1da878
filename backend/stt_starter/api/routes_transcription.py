"""Endpoint for Deepgram pre-recorded transcription.

* POST {TRANSCRIPTION_ROUTE} - multipart or urlencoded form with ``file``
  and/or ``url`` (URL wins), optional ``model``, ``tier`` and ``features``
  (JSON object of feature flags).
"""

import logging
import traceback

from fastapi import APIRouter, Depends, File, Form, UploadFile
from starlette.datastructures import UploadFile as StarletteUploadFile

from ..config import Settings
from ..exceptions import ApiError, DeepgramError, TranscriptionError
from ..services.deepgram import DeepgramClient
from ..services.transcription import transcribe
from .dependencies import get_deepgram_client, get_settings, require_session_token

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", dependencies=[Depends(require_session_token)])
async def create_transcription(
    # Plain-text "file" values (urlencoded bodies) are accepted and ignored.
    file: UploadFile | str | None = File(None),
    url: str | None = Form(None),
    model: str | None = Form(None),
    tier: str | None = Form(None),
    features: str | None = Form(None),
    settings: Settings = Depends(get_settings),
    client: DeepgramClient = Depends(get_deepgram_client),
) -> dict:
    """Transcribe an uploaded file or a remote URL."""
    model_name = model or settings.DEFAULT_MODEL
    upload = file if isinstance(file, StarletteUploadFile) else None
    file_name = upload.filename if upload else None
    logger.info("Received transcription request: url=%s file=%s model=%s", url, file_name, model_name)

    try:
        result = await transcribe(
            client,
            url=url,
            file=upload,
            model=model_name,
            tier=tier,
            features=features,
        )
    except ApiError:
        raise
    except DeepgramError as e:
        logger.error("Transcription error: %s", e, exc_info=True)
        raise TranscriptionError(str(e), details={"originalError": e.body or str(e)}) from e
    except Exception as e:
        logger.error("Transcription error: %s", e, exc_info=True)
        raise TranscriptionError(
            str(e) or e.__class__.__name__,
            details={"originalError": traceback.format_exc()},
        ) from e

    return result.to_response()
