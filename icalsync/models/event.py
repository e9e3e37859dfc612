"""Event models with Pydantic v2 validation."""

from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field

from icalsync.constants import UNTITLED_EVENT
from icalsync.utils import new_id


def normalize_newlines(value: str) -> str:
    """Fold CRLF and lone CR to LF so text survives an ICS round trip."""
    return value.replace("\r\n", "\n").replace("\r", "\n")


# Free text fields; CR line breaks are stored as LF
Text = Annotated[str, AfterValidator(normalize_newlines)]

# Fields a feed is allowed to change on a stored event
MUTABLE_FIELDS = (
    "title",
    "start_time",
    "end_time",
    "description",
    "location",
    "recurrence_rule",
    "all_day",
)


class CalendarEvent(BaseModel):
    """A stored calendar event.

    Instants are epoch milliseconds. For all-day events start_time is local
    midnight of the first day and end_time is the exclusive end (midnight after
    the last day), matching iCalendar DTEND semantics.
    """

    id: str = Field(default_factory=new_id)
    owner_id: str
    title: Text = UNTITLED_EVENT
    start_time: int
    end_time: int
    all_day: bool = False
    description: Text | None = None
    location: Text | None = None
    recurrence_rule: str | None = None
    color: str | None = None
    is_private: bool = False

    # Feed provenance
    external_uid: str | None = None
    source_subscription_id: str | None = None

    created_at: int = 0
    updated_at: int = 0

    @property
    def is_subscribed(self) -> bool:
        """True if the event came from a remote feed subscription."""
        return self.source_subscription_id is not None


class ParsedEvent(BaseModel):
    """One VEVENT block as read from ICS text."""

    uid: str
    title: Text = UNTITLED_EVENT
    start_time: int
    end_time: int
    all_day: bool = False
    description: Text | None = None
    location: Text | None = None
    recurrence_rule: str | None = None

    def mutable_fields(self) -> dict:
        """Values for the fields reconciliation may patch on a stored event."""
        return {
            "title": self.title,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "description": self.description,
            "location": self.location,
            "recurrence_rule": self.recurrence_rule,
            "all_day": self.all_day,
        }

    def to_event(
        self,
        owner_id: str,
        subscription_id: str | None = None,
        color: str | None = None,
        timestamp: int = 0,
    ) -> CalendarEvent:
        """Build a new stored event from this parsed block."""
        return CalendarEvent(
            owner_id=owner_id,
            external_uid=self.uid,
            source_subscription_id=subscription_id,
            color=color,
            created_at=timestamp,
            updated_at=timestamp,
            **self.mutable_fields(),
        )
