"""Request/response models of the transcription endpoint."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TranscriptionRequest(BaseModel):
    """A validated transcription request.

    Exactly one of ``url`` and ``file_bytes`` is set.
    """

    url: Optional[str] = None
    file_bytes: Optional[bytes] = None
    mime_type: Optional[str] = None
    model: str
    tier: Optional[str] = None
    feature_flags: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _exactly_one_source(self) -> "TranscriptionRequest":
        if (self.url is None) == (self.file_bytes is None):
            raise ValueError("exactly one of url or file_bytes must be set")
        return self

    @property
    def source(self) -> str:
        return "url" if self.url is not None else "file"


class WordEntry(BaseModel):
    word: str
    start: float
    end: float
    confidence: float
    punctuated_word: str


class TranscriptionMetadata(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_uuid: Optional[str] = None
    request_id: Optional[str] = None
    model_name: str


class TranscriptionResult(BaseModel):
    transcript: str = ""
    words: List[WordEntry] = Field(default_factory=list)
    metadata: TranscriptionMetadata
    duration: Optional[float] = None

    def to_response(self) -> Dict[str, Any]:
        """JSON body for the client; ``duration`` is omitted unless reported."""
        exclude = {"duration"} if self.duration is None else None
        return self.model_dump(exclude=exclude)
