"""Adapter functions between Flask requests/responses and the services."""

import logging
import re

from dateutil import parser as date_parser
from flask import Request, Response, jsonify

from icalsync.exceptions import (
    CalendarError,
    DuplicateEventError,
    DuplicateSubscriptionError,
    NotFoundError,
    TokenInvalidError,
    UnauthenticatedError,
    ValidationError,
)
from icalsync.models.sync import FeedResponse
from icalsync.utils import datetime_to_ms

logger = logging.getLogger(__name__)

# Status codes for domain errors surfaced by the HTTP API
ERROR_STATUS = {
    UnauthenticatedError: 401,
    TokenInvalidError: 404,
    NotFoundError: 404,
    DuplicateSubscriptionError: 409,
    DuplicateEventError: 409,
    ValidationError: 400,
}


def get_owner_id(request: Request, header: str) -> str:
    """Caller identity set by the upstream auth layer.

    Raises:
        UnauthenticatedError: If the identity header is missing or empty
    """
    owner_id = (request.headers.get(header) or "").strip()
    if not owner_id:
        raise UnauthenticatedError("Unauthorized")
    return owner_id


def parse_iso_param(value: str | None, name: str) -> int | None:
    """Parse an optional ISO-8601 query parameter to epoch ms.

    Raises:
        ValidationError: If the value is not a valid ISO-8601 date
    """
    if not value:
        return None
    try:
        return datetime_to_ms(date_parser.isoparse(value))
    except (ValueError, OverflowError):
        raise ValidationError(f"Invalid '{name}' date: {value}")


def read_json_body(request: Request) -> dict:
    """JSON object body, empty when absent.

    Raises:
        ValidationError: If the body is not a JSON object
    """
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def read_ical_upload(request: Request) -> str:
    """ICS text from a multipart 'file' field or a JSON 'icalData' field.

    Raises:
        ValidationError: If neither is present
    """
    upload = request.files.get("file")
    if upload is not None:
        content = upload.read().decode("utf-8", errors="replace")
        if content.strip():
            return content

    data = request.get_json(silent=True)
    if isinstance(data, dict):
        ical_data = data.get("icalData")
        if isinstance(ical_data, str) and ical_data.strip():
            return ical_data

    raise ValidationError("No iCal data provided")


def calendar_filename(name: str) -> str:
    """Filesystem-safe .ics filename for a calendar name."""
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return f"{slug or 'calendar'}.ics"


def to_flask_response(feed: FeedResponse) -> Response:
    """Convert a framework-neutral FeedResponse."""
    response = Response(feed.body or "", status=feed.status_code)
    for key, value in feed.headers.items():
        response.headers[key] = value
    if feed.status_code == 304:
        response.headers.pop("Content-Type", None)
    return response


def error_response(error: CalendarError):
    """JSON error body with the status mapped from the exception type."""
    for error_type, status in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return jsonify({"error": str(error)}), status
    logger.error(f"Unhandled calendar error: {error}")
    return jsonify({"error": "Internal server error"}), 500
