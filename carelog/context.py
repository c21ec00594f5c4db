"""Per-browsing-context state shared by the engines."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class RosterSession:
    """Owner and active-pet selection for one signed-in browsing context.

    Both engines read from this object; only the Session Gate writes
    ``owner_id`` and only the Pet Roster Engine writes ``active_pet_id``.
    """

    owner_id: Optional[str] = None
    active_pet_id: Optional[str] = None

    def clear(self) -> None:
        self.owner_id = None
        self.active_pet_id = None
