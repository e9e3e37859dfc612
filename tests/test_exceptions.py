"""Tests for exception classes."""

import pytest

from icalsync.exceptions import (
    CalendarError,
    DuplicateEventError,
    DuplicateSubscriptionError,
    FetchFailedError,
    NotFoundError,
    TokenInvalidError,
    UnauthenticatedError,
    ValidationError,
)


def test_calendar_error():
    """Test CalendarError base exception."""
    error = CalendarError("Test error")
    assert str(error) == "Test error"
    assert isinstance(error, Exception)


@pytest.mark.parametrize(
    "exc_class",
    [
        NotFoundError,
        ValidationError,
        UnauthenticatedError,
        TokenInvalidError,
        DuplicateSubscriptionError,
        DuplicateEventError,
        FetchFailedError,
    ],
)
def test_subclasses_calendar_error(exc_class):
    """Test every domain error can be caught as CalendarError."""
    with pytest.raises(CalendarError, match="boom"):
        raise exc_class("boom")


def test_fetch_failed_error_status_code():
    """Test FetchFailedError carries the HTTP status."""
    error = FetchFailedError("HTTP 502: Bad Gateway", status_code=502)
    assert error.status_code == 502
    assert FetchFailedError("Network error").status_code is None
