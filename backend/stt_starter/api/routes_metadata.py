"""GET /api/metadata - starter metadata from the ``[meta]`` table of deepgram.toml."""

import logging

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from ..config import Settings
from ..exceptions import MetadataError
from ..services.metadata import read_metadata
from .dependencies import get_settings

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
async def get_metadata(settings: Settings = Depends(get_settings)) -> JSONResponse:
    try:
        meta = read_metadata(settings.METADATA_FILE)
    except MetadataError as e:
        return JSONResponse(
            status_code=500,
            content={"error": "INTERNAL_SERVER_ERROR", "message": str(e)},
        )
    # TOML dates and times are not JSON-native
    return JSONResponse(content=jsonable_encoder(meta))
