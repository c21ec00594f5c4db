"""Log View-State Engine: the active pet's care logs and the derived view."""

import logging
from typing import Iterable, List, Optional, Union

from carelog.context import RosterSession
from carelog.errors import StoreError
from carelog.events import LOGS_CHANGED, VIEW_CHANGED, EventBus
from carelog.notifications import Notifier
from carelog.schemas import ALL_TYPES, CareLog, LogType
from carelog.store import DESCENDING, RemoteStore

logger = logging.getLogger(__name__)

FilterType = Union[str, LogType]


def matches_type(log: CareLog, filter_type: FilterType) -> bool:
    return filter_type == ALL_TYPES or log.type == filter_type


def matches_search(log: CareLog, search_term: str) -> bool:
    """Case-insensitive substring match against notes or caregiver."""
    if not search_term:
        return True
    term = search_term.casefold()
    return any(term in (value or "").casefold() for value in (log.notes, log.caregiver))


def derive_view(logs: Iterable[CareLog], filter_type: FilterType = ALL_TYPES, search_term: str = "") -> List[CareLog]:
    """Filter loaded logs without reordering them."""
    return [log for log in logs if matches_type(log, filter_type) and matches_search(log, search_term)]


def normalize_filter(filter_type: FilterType) -> str:
    if filter_type == ALL_TYPES:
        return ALL_TYPES
    return LogType(filter_type).value


class LogViewEngine:
    """Holds the logs of the active pet plus the filter/search state.

    Each load is tagged with the pet id it was issued for; a response that
    arrives after the active pet changed is dropped. A failed reload keeps
    the previously loaded logs on screen.
    """

    def __init__(self, store: RemoteStore, context: RosterSession, bus: EventBus, notifier: Notifier):
        self.store = store
        self.context = context
        self.bus = bus
        self.notifier = notifier
        self.pet_id: Optional[str] = None
        self.logs: List[CareLog] = []
        self.filter_type: str = ALL_TYPES
        self.search_term: str = ""
        self.loading = False

    @property
    def view(self) -> List[CareLog]:
        return derive_view(self.logs, self.filter_type, self.search_term)

    def empty_message(self) -> Optional[str]:
        if self.view:
            return None
        if not self.logs:
            return "No logs yet. Add your first care log!"
        return "No logs match your filters"

    async def load_logs(self, pet_id: str) -> Optional[List[CareLog]]:
        """Load logs for ``pet_id``; returns None when the load failed or went stale."""
        if pet_id == self.context.active_pet_id:
            self.loading = True
        try:
            records = await self.store.select("logs", {"pet_id": pet_id}, [("timestamp", DESCENDING)])
        except StoreError as e:
            if pet_id != self.context.active_pet_id:
                logger.debug(f"Discarding stale log load failure: pet_id={pet_id}, error={e}")
                return None
            self.loading = False
            logger.warning(f"Failed to load logs: pet_id={pet_id}, error={e}")
            await self.notifier.error("logs_load_failed")
            return None

        if pet_id != self.context.active_pet_id:
            logger.debug(f"Discarding stale log response: pet_id={pet_id}, active={self.context.active_pet_id}")
            return None

        self.loading = False
        self.pet_id = pet_id
        self.logs = [CareLog.model_validate(record) for record in records]
        logger.info(f"Logs loaded: pet_id={pet_id}, count={len(self.logs)}")
        await self.bus.publish(LOGS_CHANGED, pet_id=pet_id, logs=list(self.logs))
        await self._publish_view()
        return list(self.logs)

    async def on_pet_selected(self, pet_id: Optional[str], **_) -> None:
        """Drop the previous pet's logs and load the newly active pet."""
        self._clear()
        if pet_id is None:
            await self._publish_empty()
            return
        self.pet_id = pet_id
        await self.load_logs(pet_id)

    async def reload_active(self, **_) -> Optional[List[CareLog]]:
        pet_id = self.context.active_pet_id
        if pet_id is None:
            return None
        return await self.load_logs(pet_id)

    async def set_filter(self, filter_type: FilterType) -> None:
        self.filter_type = normalize_filter(filter_type)
        await self._publish_view()

    async def set_search(self, search_term: str) -> None:
        self.search_term = search_term or ""
        await self._publish_view()

    async def reset(self, **_) -> None:
        """Drop the held logs and the view state when the session ends."""
        self.filter_type = ALL_TYPES
        self.search_term = ""
        self._clear()
        await self._publish_empty()

    def _clear(self) -> None:
        self.pet_id = None
        self.logs = []
        self.loading = False

    async def _publish_empty(self) -> None:
        await self.bus.publish(LOGS_CHANGED, pet_id=self.pet_id, logs=[])
        await self._publish_view()

    async def _publish_view(self) -> None:
        await self.bus.publish(
            VIEW_CHANGED,
            pet_id=self.pet_id,
            view=self.view,
            filter_type=self.filter_type,
            search_term=self.search_term,
        )
