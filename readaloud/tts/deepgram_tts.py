"""Deepgram Aura TTS over the REST speak endpoint."""

from __future__ import annotations

import logging

import httpx

from ..errors import SynthesisError
from ..text.cleaning import clean_text_for_tts
from .base import TTSEngine

log = logging.getLogger(__name__)

DEEPGRAM_SPEAK_URL = "https://api.deepgram.com/v1/speak"


class DeepgramTTS(TTSEngine):
    """Text-to-speech using Deepgram Aura.

    One request per chunk; the whole response body is the audio payload
    (a WAV container around ``encoding`` samples at ``sample_rate``).
    """

    def __init__(
        self,
        api_key: str,
        model: str = "aura-2-iris-en",
        encoding: str = "linear16",
        sample_rate: int = 24000,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.encoding = encoding
        self.sample_rate = sample_rate
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def synthesize(self, text: str) -> bytes:
        text = clean_text_for_tts(text)
        params = {
            "model": self.model,
            "encoding": self.encoding,
            "sample_rate": str(self.sample_rate),
        }
        headers = {
            "Authorization": f"Token {self.api_key}",
            "Content-Type": "application/json",
        }
        log.debug("Converting chunk: %r", text[:100])

        try:
            response = await self.client.post(
                DEEPGRAM_SPEAK_URL,
                params=params,
                headers=headers,
                json={"text": text},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SynthesisError(
                f"Deepgram TTS returned {e.response.status_code}", chunk_text=text,
            ) from e
        except httpx.HTTPError as e:
            raise SynthesisError(f"Deepgram TTS request failed: {e}", chunk_text=text) from e

        audio = response.content
        if not audio:
            raise SynthesisError("No audio stream received", chunk_text=text)
        log.info("Deepgram TTS synthesized %d bytes", len(audio))
        return audio

    async def aclose(self) -> None:
        await self.client.aclose()
