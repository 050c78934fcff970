"""Exception types raised across the upload, chunking and synthesis stages."""

from __future__ import annotations


class ReadAloudError(Exception):
    """Base class for all service errors."""


class ConfigurationError(ReadAloudError):
    """A required credential or setting is missing."""


class ExtractionError(ReadAloudError):
    """The document could not be read or contained no text."""


class ChunkingError(ReadAloudError):
    """Chunking failed. The chunker is total over strings, so this is a bug."""


class SynthesisError(ReadAloudError):
    """The TTS backend failed for one chunk of text."""

    def __init__(self, message: str, chunk_text: str = "") -> None:
        super().__init__(message)
        self.chunk_text = chunk_text
