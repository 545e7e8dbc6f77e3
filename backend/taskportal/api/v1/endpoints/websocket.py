"""
Notification WebSocket Endpoint

Connection URL: WS /api/v1/ws

The client announces itself with {"type": "join", "userId": "<id>"}; after
that the server pushes {"type", "data", "timestamp"} frames for newMessage,
taskSubmitted, taskCompleted, taskReviewed and taskAssigned. Every other
inbound frame, text or binary, is ignored.
"""

import json
from typing import Optional
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from taskportal.core.database import utc_now
from taskportal.core.logging_config import logger
from taskportal.services.presence import PresenceRegistry


router = APIRouter()


def _parse_join(raw: str) -> Optional[str]:
    """The announced user id, or None for anything that is not a join frame"""
    try:
        frame = json.loads(raw)
    except json.JSONDecodeError:
        return None
    if not isinstance(frame, dict) or frame.get("type") != "join":
        return None
    user_id = frame.get("userId")
    if not isinstance(user_id, str) or not user_id:
        return None
    return user_id


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket):
    presence: PresenceRegistry = websocket.app.state.presence
    await websocket.accept()

    joined_user_id: Optional[str] = None
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            raw = message.get("text")
            if raw is None:
                logger.debug("Ignoring binary WebSocket frame")
                continue

            user_id = _parse_join(raw)
            if user_id is None:
                logger.debug("Ignoring non-join WebSocket frame")
                continue

            if joined_user_id and joined_user_id != user_id:
                presence.unregister(joined_user_id, websocket)
            presence.register(user_id, websocket)
            joined_user_id = user_id
            logger.info(f"WebSocket joined for user {user_id} ({len(presence)} online)")

            await websocket.send_json({
                "type": "joined",
                "data": {"userId": user_id},
                "timestamp": utc_now().isoformat(),
            })

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected for user {joined_user_id}")
    except Exception as e:
        logger.error(f"WebSocket error: {e}", exc_info=True)
    finally:
        if joined_user_id:
            presence.unregister(joined_user_id, websocket)
