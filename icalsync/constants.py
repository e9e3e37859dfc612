"""Shared constants for calendar sync."""

# ICS generation
PRODID = "-//icalsync//Calendar Feed 1.0//EN"
DEFAULT_CALENDAR_NAME = "My Calendar"
DEFAULT_UID_DOMAIN = "icalsync.local"

# Parser defaults
UNTITLED_EVENT = "Untitled Event"
BUSY_TITLE = "Busy"

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS

# Remote fetch
ACCEPT_HEADER = "text/calendar, application/calendar+xml, application/ics"
USER_AGENT = "icalsync/0.1"

# Public feed
FEED_CONTENT_TYPE = "text/calendar; charset=utf-8"
FEED_CACHE_CONTROL = "private, must-revalidate, max-age={max_age}"
FEED_TOKEN_LENGTH = 32
FEED_TOKEN_PREVIEW_LENGTH = 8

# Persistence
EVENTS_FILENAME = "events.json"
SUBSCRIPTIONS_FILENAME = "subscriptions.json"
FEED_TOKENS_FILENAME = "feed_tokens.json"
