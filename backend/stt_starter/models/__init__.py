# Namespace for Pydantic models.
from .deepgram import DeepgramResponse
from .transcription import TranscriptionMetadata, TranscriptionRequest, TranscriptionResult, WordEntry

__all__ = [
    "DeepgramResponse",
    "TranscriptionMetadata",
    "TranscriptionRequest",
    "TranscriptionResult",
    "WordEntry",
]
