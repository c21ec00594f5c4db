"""Composition root: one CareLogApp per browsing context, plus logging setup."""

import logging
import sys
from typing import Optional

from carelog.auth import MongoAuth
from carelog.configs import LOGGING_CONFIG
from carelog.context import RosterSession
from carelog.events import (
    LOG_CREATED,
    LOG_DELETED,
    PET_CREATED,
    PET_SELECTED,
    SESSION_ADMITTED,
    SESSION_REVOKED,
    EventBus,
)
from carelog.logs import LogViewEngine
from carelog.mutations import CareEventMutationService
from carelog.notifications import Notifier
from carelog.roster import PetRosterEngine
from carelog.session import Redirect, SessionGate
from carelog.store import MongoStore, RemoteStore

DASHBOARD_ROUTE = "/"


def setup_logging() -> logging.Logger:
    """Configure centralized logging for the package."""
    log_level = LOGGING_CONFIG["level"]

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format=LOGGING_CONFIG["format"],
        datefmt=LOGGING_CONFIG["datefmt"],
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Suppress noisy loggers
    logging.getLogger("pymongo").setLevel(logging.WARNING)

    return logging.getLogger("carelog")


logger = logging.getLogger(__name__)


class CareLogApp:
    """Wires the session gate, both engines and the mutation service together.

    ``location`` tracks where the rendering layer should be; the gate moves it
    to the auth route whenever the session ends, unless a custom ``redirect``
    callback is supplied.
    """

    def __init__(self, store: RemoteStore, auth: MongoAuth, redirect: Optional[Redirect] = None):
        self.store = store
        self.auth = auth
        self.location = DASHBOARD_ROUTE
        self.bus = EventBus()
        self.context = RosterSession()
        self.notifier = Notifier(self.bus)
        self.gate = SessionGate(auth, self.context, self.bus, self.notifier, redirect or self.navigate)
        self.roster = PetRosterEngine(store, self.context, self.bus, self.notifier)
        self.logs = LogViewEngine(store, self.context, self.bus, self.notifier)
        self.mutations = CareEventMutationService(store, self.gate, self.context, self.bus, self.notifier)
        self._wire()

    def _wire(self) -> None:
        self.bus.subscribe(SESSION_ADMITTED, self._on_admitted)
        self.bus.subscribe(SESSION_REVOKED, self.roster.reset)
        self.bus.subscribe(SESSION_REVOKED, self.logs.reset)
        self.bus.subscribe(PET_SELECTED, self.logs.on_pet_selected)
        self.bus.subscribe(PET_CREATED, self.roster.load_roster)
        self.bus.subscribe(LOG_CREATED, self.logs.reload_active)
        self.bus.subscribe(LOG_DELETED, self.logs.reload_active)

    async def _on_admitted(self, **_) -> None:
        self.location = DASHBOARD_ROUTE
        await self.roster.load_roster()

    def navigate(self, route: str) -> None:
        if route != self.location:
            logger.info(f"Navigating: from={self.location}, to={route}")
        self.location = route

    async def start(self) -> None:
        await self.gate.start()

    def stop(self) -> None:
        self.gate.stop()


def create_app(db=None, redirect: Optional[Redirect] = None) -> CareLogApp:
    """Build a CareLogApp on the configured MongoDB database."""
    if db is None:
        from carelog.db import db
    return CareLogApp(MongoStore(db), MongoAuth(db), redirect=redirect)
