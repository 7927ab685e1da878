"""Deepgram speech-to-text starter API."""

__version__ = "0.1.0"
