"""
Presence Registry & Notification Dispatcher

Best-effort push for UI responsiveness:
- PresenceRegistry maps an identity id to its live WebSocket
- NotificationDispatcher sends ``{type, data, timestamp}`` frames through it

The registry is created in the application lifespan and kept on
``app.state.presence``; nothing here is persisted. Messages and the task
notification log stay the durable record and can always be polled.
"""

import threading
from typing import Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder

from taskportal.core.database import utc_now
from taskportal.core.logging_config import logger


class EventType:
    """Push event names"""
    NEW_MESSAGE = "newMessage"
    TASK_SUBMITTED = "taskSubmitted"
    TASK_COMPLETED = "taskCompleted"
    TASK_REVIEWED = "taskReviewed"
    TASK_ASSIGNED = "taskAssigned"


class PresenceRegistry:
    """
    identity id -> open connection.

    Last session wins: registering a second connection for the same identity
    replaces the first. Unregistering only removes the entry when it still
    holds that very connection, so a stale socket closing never evicts a
    newer one.
    """

    def __init__(self):
        self._connections: Dict[str, Any] = {}
        # Connect, disconnect and dispatch arrive from independent connections
        self._lock = threading.Lock()

    def register(self, user_id: str, connection: Any) -> Optional[Any]:
        """Returns the connection that was displaced, if any"""
        with self._lock:
            previous = self._connections.get(user_id)
            self._connections[user_id] = connection
        if previous is not None and previous is not connection:
            logger.debug(f"Presence for {user_id} replaced by a newer connection")
            return previous
        return None

    def unregister(self, user_id: str, connection: Any) -> bool:
        with self._lock:
            if self._connections.get(user_id) is connection:
                del self._connections[user_id]
                return True
        return False

    def lookup(self, user_id: str) -> Optional[Any]:
        with self._lock:
            return self._connections.get(user_id)

    def online_user_ids(self) -> List[str]:
        with self._lock:
            return list(self._connections)

    def clear(self) -> None:
        with self._lock:
            self._connections.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)

    def __contains__(self, user_id: str) -> bool:
        with self._lock:
            return user_id in self._connections


class NotificationDispatcher:
    """Fire-and-forget sender; never raises, never retries"""

    def __init__(self, registry: PresenceRegistry):
        self.registry = registry

    async def dispatch(self, user_id: str, event_type: str, payload: Any) -> None:
        connection = self.registry.lookup(user_id)
        if connection is None:
            return

        try:
            await connection.send_json({
                "type": event_type,
                "data": jsonable_encoder(payload),
                "timestamp": utc_now().isoformat(),
            })
        except Exception as e:
            logger.debug(f"Dropping {event_type} for {user_id}: {type(e).__name__}: {e}")
            self.registry.unregister(user_id, connection)

    async def dispatch_many(self, user_ids: List[str], event_type: str, payload: Any) -> None:
        for user_id in user_ids:
            await self.dispatch(user_id, event_type, payload)
