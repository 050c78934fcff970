"""WebSocket message type definitions.

Every frame is a JSON text frame with a "type" field. Field names on the
wire are camelCase (``chunkIndex``, ``audioData``); audio is base64-encoded.
"""

from __future__ import annotations

import base64
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class Event(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


def progress_percent(index: int, total: int) -> float:
    """Progress after finishing chunk ``index`` of ``total``, in (0, 100]."""
    return (index + 1) / total * 100


# --- Observer → Server messages ---

class Ping(BaseModel):
    type: Literal["ping"] = "ping"


# --- Server → Observer messages ---

class ProcessingStarted(Event):
    type: Literal["processing_started"] = "processing_started"
    total_chunks: int = Field(alias="totalChunks")
    total_characters: int = Field(alias="totalCharacters")


class ChunkProcessing(Event):
    type: Literal["chunk_processing"] = "chunk_processing"
    chunk_index: int = Field(alias="chunkIndex")
    chunk_text: str = Field(alias="chunkText")
    progress: float


class AudioChunk(Event):
    type: Literal["audio_chunk"] = "audio_chunk"
    chunk_index: int = Field(alias="chunkIndex")
    audio_data: str = Field(alias="audioData")  # base64
    progress: float

    @classmethod
    def from_audio(cls, chunk_index: int, audio: bytes, progress: float) -> AudioChunk:
        return cls(
            chunk_index=chunk_index,
            audio_data=base64.b64encode(audio).decode("ascii"),
            progress=progress,
        )


class ChunkError(Event):
    type: Literal["chunk_error"] = "chunk_error"
    chunk_index: int = Field(alias="chunkIndex")
    error: str


class ProcessingComplete(Event):
    type: Literal["processing_complete"] = "processing_complete"


class ProcessingError(Event):
    type: Literal["processing_error"] = "processing_error"
    error: str


class Pong(Event):
    type: Literal["pong"] = "pong"


INCOMING_TYPES: dict[str, type[BaseModel]] = {
    "ping": Ping,
}


def parse_incoming(data: dict[str, Any]) -> BaseModel:
    if not isinstance(data, dict):
        raise ValueError("Expected a JSON object")
    msg_type = data.get("type")
    cls = INCOMING_TYPES.get(msg_type)  # type: ignore[arg-type]
    if cls is None:
        raise ValueError(f"Unknown message type: {msg_type}")
    return cls(**data)

