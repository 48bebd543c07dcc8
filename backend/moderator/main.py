from __future__ import annotations

import asyncio
import json
import logging
from typing import Dict, Optional, Tuple

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from moderator.api.deps import engine, engine_lock
from moderator.api.rest import router as rest_router
from moderator.websocket.handler import normalize_view, ws_manager

logger = logging.getLogger(__name__)

TICK_SECONDS = 1.0

Signature = Tuple[int, int, str]

app = FastAPI(
    title="Werewolf Moderator",
    version="0.1.0",
    description="Moderator backend for a single in-person Werewolf game.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(rest_router)


@app.get("/health")
def health() -> dict:
    with engine_lock:
        return {
            "status": "ok",
            "service": "werewolf-moderator",
            "phase": engine.phase.value,
            "players": len(engine.players),
            "connections": ws_manager.connection_count,
        }


def _state_signature() -> Signature:
    return engine.last_notice_id, len(engine.state.action_audit_log), engine.phase.value


def _both_views() -> Dict[str, Dict]:
    return {"moderator": engine.public_state("moderator"), "public": engine.public_state("public")}


def _tick_once(last_signature: Optional[Signature]) -> Tuple[bool, Dict, Signature, Optional[Dict[str, Dict]]]:
    with engine_lock:
        ticked = engine.tick()
        timers_payload = engine.public_state("public")["timers"]
        signature = _state_signature()
        states = _both_views() if signature != last_signature else None
    return ticked, timers_payload, signature, states


async def _run_ticker() -> None:
    last_signature: Optional[Signature] = None
    while True:
        await asyncio.sleep(TICK_SECONDS)
        try:
            # engine_lock is a threading lock; take it off the event loop
            ticked, timers_payload, signature, states = await asyncio.to_thread(_tick_once, last_signature)
            if ticked:
                await ws_manager.broadcast("timer_tick", timers_payload)
            if states is not None:
                await ws_manager.broadcast_game_state(states)
                last_signature = signature
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("timer tick failed")


@app.on_event("startup")
async def start_ticker() -> None:
    app.state.ticker = asyncio.create_task(_run_ticker())
    logger.info("timer ticker started")


@app.on_event("shutdown")
async def stop_ticker() -> None:
    ticker = getattr(app.state, "ticker", None)
    if ticker is None:
        return
    ticker.cancel()
    try:
        await ticker
    except asyncio.CancelledError:
        pass


def _snapshot(view_mode: str) -> Dict:
    with engine_lock:
        return engine.public_state(view_mode)


async def _send_state(websocket: WebSocket, view_mode: str) -> None:
    state = await asyncio.to_thread(_snapshot, view_mode)
    await ws_manager.send_event(websocket, "game_state", state)


@app.websocket("/ws")
async def moderator_ws(websocket: WebSocket) -> None:
    view_mode = normalize_view(websocket.query_params.get("view", "moderator"))
    await ws_manager.connect(websocket, view_mode)
    try:
        await _send_state(websocket, view_mode)
        while True:
            raw = await websocket.receive_text()
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                await ws_manager.send_event(websocket, "error", {"message": "invalid json"})
                continue
            if not isinstance(msg, dict):
                await ws_manager.send_event(websocket, "error", {"message": "message must be a json object"})
                continue
            event = msg.get("event") or msg.get("type")

            if event in ("subscribe", "change_view"):
                view_mode = await ws_manager.update_view_mode(websocket, msg.get("view_mode") or msg.get("mode"))
                reply = "subscribed" if event == "subscribe" else "view_changed"
                await ws_manager.send_event(websocket, reply, {"view_mode": view_mode})
                await _send_state(websocket, view_mode)
            elif event == "ping":
                await ws_manager.send_event(websocket, "pong", {})
            else:
                await ws_manager.send_event(websocket, "error", {"message": f"unknown event: {event}"})
    except WebSocketDisconnect:
        await ws_manager.disconnect(websocket)
    except Exception as exc:
        logger.exception("websocket handler failed")
        await ws_manager.disconnect(websocket)
        await websocket.send_json({"event": "error", "payload": {"message": str(exc)}})
