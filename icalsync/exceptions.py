"""Exception hierarchy for calendar sync operations."""


class CalendarError(Exception):
    """Base exception for calendar operations."""

    pass


class NotFoundError(CalendarError):
    """Event or subscription not found, or not owned by the caller."""

    pass


class ValidationError(CalendarError):
    """Request input failed validation."""

    pass


class UnauthenticatedError(CalendarError):
    """No caller identity on an endpoint that requires one."""

    pass


class TokenInvalidError(CalendarError):
    """Feed token is missing, revoked, or expired.

    All three cases share one exception so callers cannot tell them apart.
    """

    pass


class DuplicateSubscriptionError(CalendarError):
    """A subscription with the same URL already exists for the owner."""

    pass


class DuplicateEventError(CalendarError):
    """Two stored events would share an (owner, subscription, UID) key."""

    pass


class SubscriptionGoneError(NotFoundError):
    """Subscription was removed while a sync of it was in flight."""

    pass


class FetchFailedError(CalendarError):
    """Remote feed fetch failed (non-2xx/non-304 status or transport error)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
