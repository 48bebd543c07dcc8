from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import WebSocket

logger = logging.getLogger(__name__)

VIEW_MODES = ("moderator", "public")


@dataclass(slots=True)
class WSSubscriber:
    view_mode: str = "moderator"
    last_event_id: int = 0


class WSConnectionManager:
    def __init__(self) -> None:
        self._subscribers: Dict[WebSocket, WSSubscriber] = {}
        self._event_counter: int = 0
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, view_mode: str = "moderator") -> None:
        await websocket.accept()
        async with self._lock:
            self._subscribers[websocket] = WSSubscriber(view_mode=normalize_view(view_mode))

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._subscribers.pop(websocket, None)

    async def update_view_mode(self, websocket: WebSocket, view_mode: str) -> str:
        normalized = normalize_view(view_mode)
        async with self._lock:
            sub = self._subscribers.get(websocket)
            if sub:
                sub.view_mode = normalized
        return normalized

    @property
    def connection_count(self) -> int:
        return len(self._subscribers)

    async def _next_event_id(self) -> int:
        async with self._lock:
            self._event_counter += 1
            return self._event_counter

    @staticmethod
    def _encode(event_id: int, event: str, payload: Dict) -> str:
        return json.dumps(
            {
                "event_id": event_id,
                "event": event,
                "payload": payload,
                "ts": datetime.utcnow().isoformat(),
            },
            ensure_ascii=False,
        )

    async def send_event(self, websocket: WebSocket, event: str, payload: Dict) -> None:
        event_id = await self._next_event_id()
        async with self._lock:
            sub = self._subscribers.get(websocket)
            if sub:
                sub.last_event_id = event_id
        await websocket.send_text(self._encode(event_id, event, payload))

    async def broadcast(self, event: str, payload: Dict) -> None:
        event_id = await self._next_event_id()
        async with self._lock:
            conns = list(self._subscribers)
        message = self._encode(event_id, event, payload)
        stale: List[WebSocket] = []
        for ws in conns:
            try:
                await ws.send_text(message)
            except Exception:
                stale.append(ws)
        await self._drop(stale)

    async def broadcast_game_state(self, states: Dict[str, Dict]) -> None:
        """Push ``game_state``; each subscriber gets the payload for its view."""
        event_id = await self._next_event_id()
        async with self._lock:
            subscribers = dict(self._subscribers)
        stale: List[WebSocket] = []
        for ws, sub in subscribers.items():
            payload = states.get(sub.view_mode, states["public"])
            try:
                await ws.send_text(self._encode(event_id, "game_state", payload))
            except Exception:
                stale.append(ws)
        await self._drop(stale)

    async def _drop(self, stale: List[WebSocket]) -> None:
        if not stale:
            return
        logger.debug("dropping %d stale websocket(s)", len(stale))
        async with self._lock:
            for ws in stale:
                self._subscribers.pop(ws, None)


def normalize_view(view_mode: Optional[str]) -> str:
    return view_mode if view_mode in VIEW_MODES else "public"


ws_manager = WSConnectionManager()
