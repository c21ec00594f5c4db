"""Transient user notifications ("toasts") published through the event bus."""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional

from carelog.errors import MESSAGES, error_message
from carelog.events import NOTIFICATION, EventBus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    level: str  # "success" or "error"
    code: str
    message: str


class Notifier:
    """Builds notifications from the message registry and publishes them."""

    def __init__(self, bus: EventBus, history_size: int = 50):
        self._bus = bus
        self._history: Deque[Notification] = deque(maxlen=history_size)

    @property
    def history(self) -> List[Notification]:
        return list(self._history)

    @property
    def last(self) -> Optional[Notification]:
        return self._history[-1] if self._history else None

    async def success(self, key: str, **fmt) -> Notification:
        template = MESSAGES.get(key, key)
        return await self._publish(Notification("success", key, template.format(**fmt)))

    async def error(self, key: str, custom_message: Optional[str] = None) -> Notification:
        return await self._publish(Notification("error", key, error_message(key, custom_message)))

    async def _publish(self, notification: Notification) -> Notification:
        self._history.append(notification)
        await self._bus.publish(NOTIFICATION, notification=notification)
        return notification
