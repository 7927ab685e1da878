"""Starter metadata read from ``deepgram.toml``."""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict

from ..exceptions import MetadataError

logger = logging.getLogger(__name__)


def read_metadata(toml_path: Path) -> Dict[str, Any]:
    """Return the ``[meta]`` table of ``toml_path``.

    Raises:
        MetadataError: if the file cannot be read or parsed, or lacks ``[meta]``.
    """
    try:
        with open(toml_path, "rb") as f:
            document = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.error("Error reading metadata from %s: %s", toml_path, exc, exc_info=True)
        raise MetadataError(f"Failed to read metadata from {toml_path.name}") from exc

    meta = document.get("meta")
    if not isinstance(meta, dict):
        logger.error("Missing [meta] section in %s", toml_path)
        raise MetadataError(f"Missing [meta] section in {toml_path.name}")
    return meta
