"""In-process publish/subscribe used by the engines to announce state changes."""

import inspect
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, List, Union

logger = logging.getLogger(__name__)

SESSION_ADMITTED = "session_admitted"
SESSION_REVOKED = "session_revoked"
PET_SELECTED = "pet_selected"
ROSTER_CHANGED = "roster_changed"
LOGS_CHANGED = "logs_changed"
VIEW_CHANGED = "view_changed"
PET_CREATED = "pet_created"
LOG_CREATED = "log_created"
LOG_DELETED = "log_deleted"
NOTIFICATION = "notification"

Handler = Callable[..., Union[None, Awaitable[None]]]


class EventBus:
    """Dispatches named events to subscribed handlers.

    Handlers run in subscription order. Coroutine handlers are awaited before
    the next handler is called, so ``await bus.publish(...)`` returns only once
    every reaction (for example a reload) has finished.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)

    def subscribe(self, event: str, handler: Handler) -> Callable[[], None]:
        """Register a handler and return a callable that removes it."""
        self._handlers[event].append(handler)

        def unsubscribe():
            if handler in self._handlers[event]:
                self._handlers[event].remove(handler)

        return unsubscribe

    async def publish(self, event: str, **payload: Any) -> None:
        """Deliver an event to every handler subscribed to it."""
        logger.debug(f"Event published: event={event}, payload_keys={sorted(payload)}")
        for handler in list(self._handlers[event]):
            result = handler(**payload)
            if inspect.isawaitable(result):
                await result
