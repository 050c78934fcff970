"""OpenAI TTS implementation."""

from __future__ import annotations

import logging

import openai

from ..errors import SynthesisError
from ..text.cleaning import clean_text_for_tts
from .base import TTSEngine

log = logging.getLogger(__name__)


class OpenAITTS(TTSEngine):
    """Text-to-speech using OpenAI's streaming TTS API."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini-tts",
        voice: str = "nova",
        speed: float = 1.0,
        response_format: str = "wav",
        instructions: str = "",
    ) -> None:
        self.client = openai.AsyncOpenAI(api_key=api_key)
        self.model = model
        self.voice = voice
        self.speed = speed
        self.response_format = response_format
        self.instructions = instructions

    async def synthesize(self, text: str) -> bytes:
        """Stream TTS audio for one chunk and return it as a single payload."""
        text = clean_text_for_tts(text)
        kwargs = dict(
            model=self.model,
            voice=self.voice,
            input=text,
            response_format=self.response_format,
            speed=self.speed,
        )
        if self.instructions:
            kwargs["instructions"] = self.instructions

        audio = bytearray()
        try:
            async with self.client.audio.speech.with_streaming_response.create(
                **kwargs,
            ) as response:
                async for chunk in response.iter_bytes(chunk_size=4096):
                    audio.extend(chunk)
        except openai.OpenAIError as e:
            raise SynthesisError(f"OpenAI TTS failed: {e}", chunk_text=text) from e

        if not audio:
            raise SynthesisError("No audio stream received", chunk_text=text)
        log.info("OpenAI TTS synthesized %d bytes", len(audio))
        return bytes(audio)

    async def aclose(self) -> None:
        await self.client.close()
