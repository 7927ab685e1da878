# Router aggregator – import each route module here so the app factory can
# mount them in one place.

from . import (
    routes_metadata,
    routes_session,
    routes_static,
    routes_transcription,
)

__all__ = ["routes_metadata", "routes_session", "routes_static", "routes_transcription"]
