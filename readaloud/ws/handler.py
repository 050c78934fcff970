"""WebSocket endpoint for progress observers."""

from __future__ import annotations

import json
import logging

from fastapi import WebSocket, WebSocketDisconnect

from .broadcaster import Broadcaster
from .protocol import Event, Ping, Pong, parse_incoming

log = logging.getLogger(__name__)


class ObserverConnection:
    """Keeps one observer registered for as long as its socket is open."""

    def __init__(self, ws: WebSocket, broadcaster: Broadcaster) -> None:
        self.ws = ws
        self.broadcaster = broadcaster

    async def send_json(self, msg: Event) -> None:
        await self.ws.send_text(msg.to_json())

    async def handle(self) -> None:
        """Register, answer pings until the client goes away, unregister."""
        self.broadcaster.register(self.ws)
        try:
            while True:
                raw = await self.ws.receive()
                if raw["type"] == "websocket.disconnect":
                    break
                if raw.get("text"):
                    await self._handle_text(raw["text"])
        except WebSocketDisconnect:
            log.info("Observer disconnected")
        except Exception:
            log.exception("Observer connection error")
        finally:
            self.broadcaster.unregister(self.ws)

    async def _handle_text(self, text: str) -> None:
        try:
            msg = parse_incoming(json.loads(text))
        except (json.JSONDecodeError, ValueError) as e:
            log.warning("Ignoring observer message: %s (raw: %s)", e, text[:200])
            return

        match msg:
            case Ping():
                await self.send_json(Pong())
