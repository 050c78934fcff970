import json
import pathlib
import sys

import pytest
from starlette.websockets import WebSocketState

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from readaloud.errors import SynthesisError  # noqa: E402
from readaloud.tts.base import TTSEngine  # noqa: E402


class FakeObserver:
    """Stands in for a connected WebSocket and records what it receives."""

    def __init__(self, name: str = "observer", fail: bool = False) -> None:
        self.name = name
        self.fail = fail
        self.application_state = WebSocketState.CONNECTED
        self.client_state = WebSocketState.CONNECTED
        self.received: list[dict] = []

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise RuntimeError(f"{self.name} is gone")
        self.received.append(json.loads(data))

    @property
    def types(self) -> list[str]:
        return [msg["type"] for msg in self.received]


class FakeEngine(TTSEngine):
    """Returns ``b"audio:<text>"`` and fails for any text listed in ``fail_on``."""

    def __init__(self, fail_on: set[str] | None = None, on_call=None) -> None:
        self.fail_on = fail_on or set()
        self.on_call = on_call
        self.calls: list[str] = []
        self.closed = False

    async def synthesize(self, text: str) -> bytes:
        self.calls.append(text)
        if self.on_call is not None:
            self.on_call(len(self.calls) - 1, text)
        if text in self.fail_on:
            raise SynthesisError("backend unavailable", chunk_text=text)
        return f"audio:{text}".encode()

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def observer() -> FakeObserver:
    return FakeObserver()


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()
