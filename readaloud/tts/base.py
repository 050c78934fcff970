"""Abstract TTS interface."""

from __future__ import annotations

from abc import ABC, abstractmethod


class TTSEngine(ABC):
    """Base class for text-to-speech engines."""

    @abstractmethod
    async def synthesize(self, text: str) -> bytes:
        """Convert one chunk of text to a complete audio payload.

        Raises SynthesisError when the backend fails or returns no audio.
        """
        ...

    async def aclose(self) -> None:
        """Release network resources held by the engine."""
