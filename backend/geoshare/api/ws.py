"""WebSocket endpoint for live navigation state."""

import asyncio
import logging

import orjson
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from geoshare.api.navigation import state_out
from geoshare.core.errors import SessionNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()

# How often an idle stream checks that its session and queue still exist
SUBSCRIBER_CHECK_SECONDS = 15.0

# Will be set by main.py on startup
broadcaster = None
sessions = None


@router.websocket("/ws/navigation/{session_id}")
async def navigation_ws(websocket: WebSocket, session_id: str) -> None:
    """Stream state updates of one navigation session."""
    await websocket.accept()

    if broadcaster is None or sessions is None:
        await websocket.close(code=1011, reason="Service not ready")
        return

    try:
        session = sessions.get(session_id)
    except SessionNotFoundError:
        await websocket.close(code=1008, reason="Unknown session")
        return

    queue = broadcaster.subscribe(session_id)
    try:
        # Send current snapshot first
        snapshot = {
            "type": "snapshot",
            "session_id": session_id,
            "state": state_out(session).model_dump(mode="json"),
        }
        await websocket.send_bytes(orjson.dumps(snapshot))

        while True:
            try:
                data = await asyncio.wait_for(queue.get(), timeout=SUBSCRIBER_CHECK_SECONDS)
            except asyncio.TimeoutError:
                if session_id not in sessions or not broadcaster.is_subscribed(session_id, queue):
                    await websocket.close()
                    break
                continue
            await websocket.send_bytes(data)
            if orjson.loads(data).get("type") == "closed":
                await websocket.close()
                break
    except WebSocketDisconnect:
        pass
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.exception("WebSocket error")
    finally:
        broadcaster.unsubscribe(session_id, queue)
