"""Pydantic models for the subset of the Deepgram pre-recorded response we read.

Only the fields the normaliser projects are declared; everything else in the
upstream payload is ignored. All containers are optional so that a
structurally incomplete response still parses and the normaliser can report
it as a transcription failure.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DeepgramWord(BaseModel):
    word: str
    start: float
    end: float
    confidence: float
    # Only present when punctuate/smart_format is on.
    punctuated_word: Optional[str] = None


class DeepgramAlternative(BaseModel):
    transcript: Optional[str] = None
    confidence: Optional[float] = None
    words: List[DeepgramWord] = Field(default_factory=list)


class DeepgramChannel(BaseModel):
    alternatives: List[DeepgramAlternative] = Field(default_factory=list)


class DeepgramResults(BaseModel):
    channels: List[DeepgramChannel] = Field(default_factory=list)


class DeepgramMetadata(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    request_id: Optional[str] = None
    duration: Optional[float] = None
    # Keyed by model UUID.
    model_info: Dict[str, Any] = Field(default_factory=dict)


class DeepgramResponse(BaseModel):
    metadata: Optional[DeepgramMetadata] = None
    results: Optional[DeepgramResults] = None

    def first_alternative(self) -> Optional[DeepgramAlternative]:
        """Return ``results.channels[0].alternatives[0]`` or ``None``."""
        if self.results is None or not self.results.channels:
            return None
        alternatives = self.results.channels[0].alternatives
        return alternatives[0] if alternatives else None
