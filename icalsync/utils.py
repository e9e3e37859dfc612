"""Utility functions for icalsync."""

import time
import uuid
from datetime import date, datetime, timezone, tzinfo
from typing import Callable, TypeVar

import pydantic

from icalsync.exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)

# Returns the current instant in epoch milliseconds
Clock = Callable[[], int]


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def new_id() -> str:
    """Generate an internal record identifier."""
    return uuid.uuid4().hex


def ms_to_utc(ms: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def ms_to_local_date(ms: int, tz: tzinfo | None = None) -> date:
    """Convert epoch milliseconds to a calendar date.

    Uses ``tz`` when given, otherwise the host's local zone.
    """
    return datetime.fromtimestamp(ms / 1000, tz=tz).date()


def datetime_to_ms(dt: datetime) -> int:
    """Convert a datetime to epoch milliseconds.

    Naive datetimes are interpreted as local wall-clock time.
    """
    return int(round(dt.timestamp() * 1000))


def build_record(model: type[ModelT], data: dict) -> ModelT:
    """
    Validate a dict into a model instance.

    Raises:
        ValidationError: Naming the first field that failed
    """
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"])
        raise ValidationError(f"Invalid value for '{field}': {error['msg']}") from e
