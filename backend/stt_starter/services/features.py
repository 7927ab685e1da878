"""Mapping of caller-supplied feature flags onto Deepgram request options.

Recognised flags form a closed set (:class:`FeatureFlag`). Each variant knows
the Deepgram option it sets and how to coerce the caller's value. Unknown
keys are logged and ignored; malformed values of known keys are collected
and reported together as one validation error.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from ..exceptions import ValidationError

logger = logging.getLogger(__name__)

SUMMARIZE_VERSION = "v2"


class FeatureFlag(str, Enum):
    """Feature flags forwarded to Deepgram."""

    SMART_FORMAT = "smart_format"
    PUNCTUATE = "punctuate"
    PARAGRAPHS = "paragraphs"
    UTTERANCES = "utterances"
    NUMERALS = "numerals"
    PROFANITY_FILTER = "profanity_filter"
    DIARIZE = "diarize"
    SUMMARIZE = "summarize"
    DETECT_TOPICS = "detect_topics"

    @classmethod
    def lookup(cls, key: str) -> Optional["FeatureFlag"]:
        try:
            return cls(key)
        except ValueError:
            return None

    def coerce(self, value: Any) -> Any:
        """Return the option value for this flag. Raises ``ValueError`` if malformed."""
        if self is FeatureFlag.SUMMARIZE:
            # Deepgram only accepts a summariser version here.
            return SUMMARIZE_VERSION
        return parse_bool(value)

    def apply(self, options: Dict[str, Any], value: Any) -> None:
        options[self.value] = self.coerce(value)


def parse_bool(value: Any) -> bool:
    """Parse ``true``/``false`` (any case, surrounding whitespace ignored)."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise ValueError(f"{value!r} is not a valid boolean")


def parse_features(raw: Optional[str]) -> Dict[str, Any]:
    """Decode the ``features`` form field (a JSON object) into a mapping."""
    if raw is None or not raw.strip():
        return {}
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError(
            "Invalid JSON data in the features field",
            code="INVALID_FEATURES",
            details={"originalError": str(exc)},
        ) from exc
    if not isinstance(decoded, dict):
        raise ValidationError(
            "The features field must be a JSON object",
            code="INVALID_FEATURES",
            details={"originalError": f"got {type(decoded).__name__}"},
        )
    return decoded


def apply_features(options: Dict[str, Any], flags: Mapping[str, Any]) -> Dict[str, Any]:
    """Set the Deepgram option of every recognised flag in ``flags``.

    ``options`` is updated in place and returned.
    """
    invalid: List[Dict[str, str]] = []
    for key, value in flags.items():
        flag = FeatureFlag.lookup(key)
        if flag is None:
            logger.warning("Feature %s not recognized, ignoring it.", key)
            continue
        try:
            flag.apply(options, value)
        except ValueError as exc:
            invalid.append({"flag": key, "value": str(value), "reason": str(exc)})

    if invalid:
        names = ", ".join(item["flag"] for item in invalid)
        raise ValidationError(
            f"Invalid value for feature flag(s): {names}",
            code="INVALID_FEATURE_VALUE",
            details={"invalidFeatures": invalid, "originalError": f"Invalid value for feature flag(s): {names}"},
        )
    return options
