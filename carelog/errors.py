"""Error and notification message registry plus the exception taxonomy."""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ErrorDef:
    """Definition of a single user-facing message."""

    code: str
    message: str


ERRORS: Dict[str, ErrorDef] = {
    # Generic errors
    "validation_error": ErrorDef("validation_error", "Invalid data"),
    "internal_error": ErrorDef("internal_error", "Something went wrong"),
    # Session / access
    "unauthorized": ErrorDef("unauthorized", "Not authenticated"),
    "invalid_credentials": ErrorDef("invalid_credentials", "Invalid username or password"),
    "user_exists": ErrorDef("user_exists", "A user with this name already exists"),
    # Store
    "store_error": ErrorDef("store_error", "Storage request failed"),
    "record_not_found": ErrorDef("record_not_found", "Record not found"),
    "invalid_record_id": ErrorDef("invalid_record_id", "Invalid record id"),
    "upload_error": ErrorDef("upload_error", "Failed to upload file"),
    "photo_not_found": ErrorDef("photo_not_found", "Photo not found"),
    # Load / mutation failures shown as notifications
    "pets_load_failed": ErrorDef("pets_load_failed", "Failed to load pets"),
    "logs_load_failed": ErrorDef("logs_load_failed", "Failed to load logs"),
    "pet_create_failed": ErrorDef("pet_create_failed", "Failed to add pet"),
    "log_create_failed": ErrorDef("log_create_failed", "Failed to add log"),
    "log_delete_failed": ErrorDef("log_delete_failed", "Failed to delete log"),
    "no_active_pet": ErrorDef("no_active_pet", "Select a pet first"),
}

MESSAGES: Dict[str, str] = {
    "pet_created": "{name} has been added!",
    "log_created": "Log added successfully!",
    "log_deleted": "Log deleted",
    "signed_out": "Signed out successfully",
}


def error_message(key: str, custom_message: Optional[str] = None) -> str:
    """Resolve the user-facing text for an error key.

    Args:
        key: Error key from ERRORS dictionary.
        custom_message: Optional custom message to override the default one.

    Returns:
        The message to show to the user.
    """
    if custom_message:
        return custom_message
    err = ERRORS.get(key)
    if err is None:
        logger.warning(f"Unknown error key: {key}")
        return "Unknown error"
    return err.message


class CareLogError(Exception):
    """Base class for errors raised by the core."""

    code = "internal_error"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None):
        if code is not None:
            self.code = code
        self.message = message or error_message(self.code)
        super().__init__(self.message)


class ValidationError(CareLogError):
    """Required input is missing or invalid; raised before the store is touched."""

    code = "validation_error"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class StoreError(CareLogError):
    """Network, permission or constraint failure reported by the store."""

    code = "store_error"


class AccessDenied(CareLogError):
    """The core was used without an admitted session."""

    code = "unauthorized"


class AuthError(CareLogError):
    """Sign-in or sign-up failure."""

    code = "invalid_credentials"
