"""Connected observers and event fan-out."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from starlette.websockets import WebSocketState

from .protocol import (
    AudioChunk,
    ChunkError,
    ChunkProcessing,
    Event,
    ProcessingComplete,
    ProcessingError,
    ProcessingStarted,
    progress_percent,
)

log = logging.getLogger(__name__)


class Observer(Protocol):
    """Anything that can receive a JSON text frame, normally a WebSocket."""

    application_state: WebSocketState

    async def send_text(self, data: str) -> None: ...


def is_open(observer: Any) -> bool:
    state = getattr(observer, "application_state", WebSocketState.CONNECTED)
    if state != WebSocketState.CONNECTED:
        return False
    client_state = getattr(observer, "client_state", WebSocketState.CONNECTED)
    return client_state == WebSocketState.CONNECTED


class Broadcaster:
    """Owns the set of connected observers and delivers events to them.

    Each ``publish`` iterates a snapshot of the set. An observer removed while
    a publish is in flight gets nothing further, and one that fails to
    receive is dropped without affecting the others.
    """

    def __init__(self) -> None:
        # keyed by id() so observers need not be hashable
        self._observers: dict[int, Observer] = {}

    def register(self, observer: Observer) -> None:
        if id(observer) not in self._observers:
            self._observers[id(observer)] = observer
            log.info("Observer connected (%d total)", len(self._observers))

    def unregister(self, observer: Observer) -> None:
        if self._observers.pop(id(observer), None) is not None:
            log.info("Observer disconnected (%d total)", len(self._observers))

    def clear(self) -> None:
        self._observers.clear()

    def __contains__(self, observer: object) -> bool:
        return self._observers.get(id(observer)) is observer

    def __len__(self) -> int:
        return len(self._observers)

    async def publish(self, event: Event) -> int:
        """Send ``event`` to every open observer. Returns the delivery count."""
        payload = event.to_json()
        delivered = 0
        for observer in list(self._observers.values()):
            if observer not in self or not is_open(observer):
                continue
            try:
                await observer.send_text(payload)
            except Exception:
                log.exception("Delivery of %s failed, dropping observer", event.type)
                self.unregister(observer)
                continue
            delivered += 1
        return delivered

    async def processing_started(self, total_chunks: int, total_characters: int) -> None:
        await self.publish(ProcessingStarted(
            total_chunks=total_chunks, total_characters=total_characters,
        ))

    async def chunk_processing(self, index: int, text: str, total: int) -> None:
        await self.publish(ChunkProcessing(
            chunk_index=index, chunk_text=text, progress=progress_percent(index, total),
        ))

    async def audio_chunk(self, index: int, audio: bytes, total: int) -> None:
        await self.publish(AudioChunk.from_audio(index, audio, progress_percent(index, total)))

    async def chunk_error(self, index: int, message: str) -> None:
        await self.publish(ChunkError(chunk_index=index, error=message))

    async def processing_complete(self) -> None:
        await self.publish(ProcessingComplete())

    async def processing_error(self, message: str) -> None:
        await self.publish(ProcessingError(error=message))
