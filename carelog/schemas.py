"""Pydantic models for store records, entry drafts and validated create requests."""

import math
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ALL_TYPES = "all"


class Species(str, Enum):
    DOG = "dog"
    CAT = "cat"
    BIRD = "bird"
    RABBIT = "rabbit"
    OTHER = "other"


class LogType(str, Enum):
    FEEDING = "feeding"
    WALKING = "walking"
    GROOMING = "grooming"
    MEDICAL = "medical"
    MEDICATION = "medication"
    OTHER = "other"


# Inputs an entry surface should show for each log type, beyond the common ones
CONDITIONAL_FIELDS: Dict[LogType, List[str]] = {
    LogType.FEEDING: ["quantity", "quantity_unit"],
    LogType.WALKING: ["duration_mins"],
}
COMMON_LOG_FIELDS = ["type", "timestamp", "caregiver", "notes"]


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes coming back from the store as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def current_minute() -> str:
    """Local wall-clock time truncated to the minute, as a datetime-local input value."""
    return datetime.now().strftime("%Y-%m-%dT%H:%M")


def blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def parse_float_lenient(value: Any) -> Optional[float]:
    """Parse numeric text; anything unparseable is treated as absent."""
    value = blank_to_none(value)
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_int_lenient(value: Any) -> Optional[int]:
    """Parse whole-number text, truncating decimals; unparseable input is absent."""
    number = parse_float_lenient(value)
    if number is None:
        return None
    return int(number)


# ============================================================================
# Store records
# ============================================================================


class Pet(BaseModel):
    """A pet as returned by the store."""

    id: str
    owner_id: str
    name: str
    species: Species
    breed: Optional[str] = None
    date_of_birth: Optional[date] = None
    notes: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("created_at")
    @classmethod
    def _created_at_utc(cls, v):
        return as_utc(v) if v is not None else v


class CareLog(BaseModel):
    """A care event as returned by the store."""

    id: str
    pet_id: str
    type: LogType
    timestamp: datetime
    quantity: Optional[float] = None
    quantity_unit: Optional[str] = None
    duration_mins: Optional[int] = None
    caregiver: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("timestamp")
    @classmethod
    def _timestamp_utc(cls, v):
        return as_utc(v)


# ============================================================================
# Entry drafts (text as typed into an entry surface)
# ============================================================================


class PhotoFile(BaseModel):
    """A photo chosen in the pet form."""

    filename: str
    data: bytes
    content_type: Optional[str] = None

    @property
    def extension(self) -> str:
        suffix = PurePosixPath(self.filename).suffix.lstrip(".").lower()
        return suffix or "bin"


class Draft(BaseModel):
    """Mutable form state; ``reset`` restores every field to its default."""

    def reset(self) -> None:
        for name, field in type(self).model_fields.items():
            setattr(self, name, field.get_default(call_default_factory=True))


class PetDraft(Draft):
    name: str = ""
    species: str = ""
    breed: str = ""
    date_of_birth: str = ""
    notes: str = ""
    photo: Optional[PhotoFile] = None


class LogDraft(Draft):
    type: str = ""
    timestamp: str = Field(default_factory=current_minute)
    quantity: str = ""
    quantity_unit: str = ""
    duration_mins: str = ""
    caregiver: str = ""
    notes: str = ""

    def visible_fields(self) -> List[str]:
        """Inputs to expose for the currently chosen type."""
        try:
            log_type = LogType(self.type)
        except ValueError:
            return list(COMMON_LOG_FIELDS)
        return COMMON_LOG_FIELDS[:2] + CONDITIONAL_FIELDS.get(log_type, []) + COMMON_LOG_FIELDS[2:]


# ============================================================================
# Validated create requests
# ============================================================================


class PetCreate(BaseModel):
    """Validated input for a new pet."""

    name: str = Field(..., min_length=1, max_length=100)
    species: Species
    breed: Optional[str] = None
    date_of_birth: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name_required(cls, v):
        v = blank_to_none(v)
        if v is None:
            raise ValueError("Name is required")
        return v

    @field_validator("species", mode="before")
    @classmethod
    def _species_required(cls, v):
        if blank_to_none(v) is None:
            raise ValueError("Species is required")
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("breed", "notes", "date_of_birth", mode="before")
    @classmethod
    def _optional_text(cls, v):
        return blank_to_none(v)

    @field_validator("date_of_birth")
    @classmethod
    def _birth_date_range(cls, v):
        if v is None:
            return v
        today = date.today()
        if v > today:
            raise ValueError("Date of birth cannot be in the future")
        if v < today - timedelta(days=50 * 365):
            raise ValueError("Date of birth cannot be more than 50 years in the past")
        return v

    def to_record(self, owner_id: str, photo_url: Optional[str]) -> Dict[str, Any]:
        return {
            "owner_id": owner_id,
            "name": self.name,
            "species": self.species.value,
            "breed": self.breed,
            "date_of_birth": self.date_of_birth.isoformat() if self.date_of_birth else None,
            "notes": self.notes,
            "photo_url": photo_url,
            "created_at": datetime.now(timezone.utc),
        }


class LogCreate(BaseModel):
    """Validated input for a new care log."""

    type: LogType
    timestamp: datetime
    quantity: Optional[float] = None
    quantity_unit: Optional[str] = None
    duration_mins: Optional[int] = None
    caregiver: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def _type_required(cls, v):
        if blank_to_none(v) is None:
            raise ValueError("Log type is required")
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("timestamp", mode="before")
    @classmethod
    def _parse_timestamp(cls, v):
        v = blank_to_none(v)
        if v is None:
            raise ValueError("Timestamp is required")
        if isinstance(v, str):
            try:
                v = datetime.fromisoformat(v)
            except ValueError:
                raise ValueError(f"Invalid timestamp. Expected YYYY-MM-DDTHH:MM, got '{v}'")
        if isinstance(v, datetime):
            # datetime-local input carries no zone: it is the user's local time
            return v.astimezone(timezone.utc)
        return v

    @field_validator("quantity", mode="before")
    @classmethod
    def _lenient_quantity(cls, v):
        return parse_float_lenient(v)

    @field_validator("duration_mins", mode="before")
    @classmethod
    def _lenient_duration(cls, v):
        return parse_int_lenient(v)

    @field_validator("quantity_unit", "caregiver", "notes", mode="before")
    @classmethod
    def _optional_text(cls, v):
        return blank_to_none(v)

    def to_record(self, pet_id: str) -> Dict[str, Any]:
        return {
            "pet_id": pet_id,
            "type": self.type.value,
            "timestamp": self.timestamp,
            "quantity": self.quantity,
            "quantity_unit": self.quantity_unit,
            "duration_mins": self.duration_mins,
            "caregiver": self.caregiver,
            "notes": self.notes,
        }
