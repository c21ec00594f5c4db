"""Pet Roster Engine: the owner's pets and the active-pet selection."""

import logging
from typing import List, Optional

from carelog.context import RosterSession
from carelog.errors import AccessDenied, StoreError
from carelog.events import PET_SELECTED, ROSTER_CHANGED, EventBus
from carelog.notifications import Notifier
from carelog.schemas import Pet
from carelog.store import DESCENDING, RemoteStore

logger = logging.getLogger(__name__)


class PetRosterEngine:
    """Holds the pet collection for the signed-in owner.

    Pets are ordered most-recently-created first. Whenever a load returns pets
    and nothing is selected, the first pet becomes active. If the active pet
    disappears from a reload, the selection is cleared for that load.
    """

    def __init__(self, store: RemoteStore, context: RosterSession, bus: EventBus, notifier: Notifier):
        self.store = store
        self.context = context
        self.bus = bus
        self.notifier = notifier
        self.pets: List[Pet] = []
        self.loading = False

    @property
    def active_pet_id(self) -> Optional[str]:
        return self.context.active_pet_id

    @property
    def active_pet(self) -> Optional[Pet]:
        return next((pet for pet in self.pets if pet.id == self.context.active_pet_id), None)

    @property
    def is_empty(self) -> bool:
        return not self.pets

    async def load_roster(self, **_) -> Optional[List[Pet]]:
        """Load the owner's pets; returns None when the load failed or was discarded."""
        owner_id = self.context.owner_id
        if owner_id is None:
            raise AccessDenied()

        self.loading = True
        try:
            records = await self.store.select("pets", {"owner_id": owner_id}, [("created_at", DESCENDING)])
        except StoreError as e:
            logger.warning(f"Failed to load pets: owner={owner_id}, error={e}")
            await self.notifier.error("pets_load_failed")
            return None
        finally:
            self.loading = False

        if self.context.owner_id != owner_id:
            logger.debug(f"Discarding stale roster response: owner={owner_id}")
            return None

        self.pets = [Pet.model_validate(record) for record in records]
        logger.info(f"Roster loaded: owner={owner_id}, pets={len(self.pets)}")
        await self.bus.publish(ROSTER_CHANGED, pets=list(self.pets))

        active_id = self.context.active_pet_id
        if active_id is not None and self.active_pet is None:
            logger.info(f"Active pet no longer in roster, clearing selection: pet_id={active_id}")
            await self._set_active(None)
        elif active_id is None and self.pets:
            await self._set_active(self.pets[0].id)

        return list(self.pets)

    async def select_pet(self, pet_id: str) -> None:
        """Make ``pet_id`` the active pet."""
        if all(pet.id != pet_id for pet in self.pets):
            raise ValueError(f"Pet is not in the roster: {pet_id}")
        if pet_id == self.context.active_pet_id:
            return
        await self._set_active(pet_id)

    async def reset(self, **_) -> None:
        """Drop the held roster when the session ends."""
        self.pets = []
        self.loading = False
        await self.bus.publish(ROSTER_CHANGED, pets=[])

    async def _set_active(self, pet_id: Optional[str]) -> None:
        self.context.active_pet_id = pet_id
        await self.bus.publish(PET_SELECTED, pet_id=pet_id)
