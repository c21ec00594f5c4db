"""Care Event Mutation Service: create pets and logs, delete logs.

Every mutation is confirm-then-reload: nothing changes client-side until the
store acknowledges the write, and the owning engine then reloads from the
store through the published event.
"""

import asyncio
import logging
import uuid
from typing import Optional

from carelog.configs import STORAGE_CONFIG
from carelog.context import RosterSession
from carelog.errors import StoreError, ValidationError, error_message
from carelog.events import LOG_CREATED, LOG_DELETED, PET_CREATED, EventBus
from carelog.images import optimize_image
from carelog.notifications import Notifier
from carelog.pydantic_helpers import validate_input
from carelog.schemas import LogCreate, LogDraft, PetCreate, PetDraft, PhotoFile
from carelog.session import SessionGate
from carelog.store import RemoteStore

logger = logging.getLogger(__name__)


class CareEventMutationService:
    def __init__(
        self,
        store: RemoteStore,
        gate: SessionGate,
        context: RosterSession,
        bus: EventBus,
        notifier: Notifier,
        photos_bucket: Optional[str] = None,
    ):
        self.store = store
        self.gate = gate
        self.context = context
        self.bus = bus
        self.notifier = notifier
        self.photos_bucket = photos_bucket or STORAGE_CONFIG["pet_photos_bucket"]

    async def create_pet(self, draft: PetDraft) -> Optional[str]:
        """Upload the optional photo, insert the pet and reset the draft.

        An uploaded photo is not removed if the insert fails afterwards.
        Returns the new pet id, or None if the store rejected the request.
        """
        owner_id = self.gate.require_owner()
        data = validate_input(PetCreate, draft, context="pet creation")

        try:
            photo_url = None
            if draft.photo is not None:
                photo_url = await self._upload_photo(owner_id, draft.photo)
            pet_id = await self.store.insert("pets", data.to_record(owner_id, photo_url))
        except StoreError as e:
            logger.warning(f"Pet creation failed: owner={owner_id}, name={data.name}, error={e}")
            await self.notifier.error("pet_create_failed", e.message)
            return None

        logger.info(f"Pet created: id={pet_id}, name={data.name}, owner={owner_id}")
        draft.reset()
        await self.notifier.success("pet_created", name=data.name)
        await self.bus.publish(PET_CREATED, pet_id=pet_id)
        return pet_id

    async def create_log(self, draft: LogDraft) -> Optional[str]:
        """Insert a log for the active pet; the active pet's logs reload on success."""
        self.gate.require_owner()
        pet_id = self.context.active_pet_id
        if pet_id is None:
            raise ValidationError(error_message("no_active_pet"), field="pet_id")
        data = validate_input(LogCreate, draft, context="log creation")

        try:
            log_id = await self.store.insert("logs", data.to_record(pet_id))
        except StoreError as e:
            logger.warning(f"Log creation failed: pet_id={pet_id}, type={data.type.value}, error={e}")
            await self.notifier.error("log_create_failed", e.message)
            return None

        logger.info(f"Log created: id={log_id}, pet_id={pet_id}, type={data.type.value}")
        draft.reset()
        await self.notifier.success("log_created")
        await self.bus.publish(LOG_CREATED, log_id=log_id, pet_id=pet_id)
        return log_id

    async def delete_log(self, log_id: str) -> bool:
        """Delete a log by id; no confirmation step happens here."""
        self.gate.require_owner()
        pet_id = self.context.active_pet_id

        try:
            await self.store.delete("logs", log_id)
        except StoreError as e:
            logger.warning(f"Log deletion failed: id={log_id}, pet_id={pet_id}, error={e}")
            await self.notifier.error("log_delete_failed", e.message)
            return False

        logger.info(f"Log deleted: id={log_id}, pet_id={pet_id}")
        await self.notifier.success("log_deleted")
        await self.bus.publish(LOG_DELETED, log_id=log_id, pet_id=pet_id)
        return True

    async def _upload_photo(self, owner_id: str, photo: PhotoFile) -> str:
        data, content_type, extension = photo.data, photo.content_type, photo.extension
        optimized = await asyncio.to_thread(optimize_image, photo.data)
        if optimized is not None:
            data, content_type = optimized
            extension = "webp"

        # One random name per upload
        path = f"{owner_id}/{uuid.uuid4().hex}.{extension}"
        await self.store.upload_blob(self.photos_bucket, path, data, content_type)
        return self.store.public_url(self.photos_bucket, path)
