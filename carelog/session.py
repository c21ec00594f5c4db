"""Session Gate: admits or revokes access as the auth session stream changes."""

import inspect
import logging
from typing import Awaitable, Callable, Optional, Union

from carelog.auth import AuthUser, MongoAuth, SessionEvent
from carelog.context import RosterSession
from carelog.errors import AccessDenied
from carelog.events import SESSION_ADMITTED, SESSION_REVOKED, EventBus
from carelog.notifications import Notifier

logger = logging.getLogger(__name__)

AUTH_ROUTE = "/auth"

Redirect = Callable[[str], Union[None, Awaitable[None]]]


class SessionGate:
    """Single source of truth for access to the dashboard.

    Every session notification is re-evaluated. Signing out only ends the
    session; the redirect follows from the resulting ``unauthenticated`` event.
    """

    def __init__(
        self,
        auth: MongoAuth,
        context: RosterSession,
        bus: EventBus,
        notifier: Notifier,
        redirect: Redirect,
        auth_route: str = AUTH_ROUTE,
    ):
        self.auth = auth
        self.context = context
        self.bus = bus
        self.notifier = notifier
        self.redirect = redirect
        self.auth_route = auth_route
        self.user: Optional[AuthUser] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def admitted(self) -> bool:
        return self.user is not None

    def require_owner(self) -> str:
        if self.user is None:
            raise AccessDenied()
        return self.user.id

    async def start(self) -> None:
        """Check the current session, then follow every later change."""
        session = await self.auth.get_session()
        if self._unsubscribe is None:
            self._unsubscribe = self.auth.subscribe(self.on_session_event)
        event = SessionEvent.signed_in(session.user) if session else SessionEvent.signed_out()
        await self.on_session_event(event)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def sign_out(self) -> None:
        await self.auth.sign_out()
        await self.notifier.success("signed_out")

    async def on_session_event(self, event: SessionEvent) -> None:
        if event.authenticated:
            await self._admit(event.user)
        else:
            await self._revoke()

    async def _admit(self, user: AuthUser) -> None:
        if self.user == user:
            return
        if self.user is not None:
            # Another account signed in within the same browsing context
            await self._clear()
        self.user = user
        self.context.owner_id = user.id
        logger.info(f"Session admitted: user={user.username}, user_id={user.id}")
        await self.bus.publish(SESSION_ADMITTED, user=user)

    async def _revoke(self) -> None:
        if self.user is not None:
            logger.info(f"Session revoked: user={self.user.username}")
        await self._clear()
        result = self.redirect(self.auth_route)
        if inspect.isawaitable(result):
            await result

    async def _clear(self) -> None:
        self.user = None
        self.context.clear()
        await self.bus.publish(SESSION_REVOKED)
