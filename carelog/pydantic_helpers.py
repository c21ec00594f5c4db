"""Helpers to turn entry drafts into validated pydantic models.

Pydantic's own ``ValidationError`` is translated into the core's
``carelog.errors.ValidationError`` so callers only deal with one taxonomy.
"""

import logging
from typing import Any, Dict, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from carelog.errors import ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def validate_input(model_class: Type[T], data: Union[BaseModel, Dict[str, Any]], context: str = "") -> T:
    """
    Validate draft or dict input against a pydantic model.

    Args:
        model_class: Pydantic model class to validate against
        data: A draft model or a plain dict of raw input values
        context: Optional context string for error logging

    Returns:
        The validated model instance.

    Raises:
        ValidationError: With the first error message and the offending field.
    """
    if isinstance(data, BaseModel):
        data = data.model_dump()

    try:
        return model_class.model_validate(data)
    except PydanticValidationError as e:
        if context:
            logger.warning(f"Validation error in {context}: {e}")

        errors = e.errors()
        if errors:
            first = errors[0]
            msg = first.get("msg", str(e))
            if msg.startswith("Value error, "):
                msg = msg[len("Value error, ") :]
            loc = first.get("loc") or ()
            field = str(loc[0]) if loc else None
            raise ValidationError(msg, field=field) from e

        raise ValidationError(str(e)) from e
