from datetime import datetime, timedelta, timezone

import pytest

from icalsync import create_app
from icalsync.config import SyncConfig
from icalsync.context import AppContext
from icalsync.exceptions import FetchFailedError
from icalsync.models.sync import FetchResult
from icalsync.storage import (
    MemoryEventStore,
    MemoryFeedTokenStore,
    MemorySubscriptionRegistry,
)

# 2023-11-14T22:13:20Z
START_MS = 1_700_000_000_000

# Fixed zone so all-day and floating-time results do not depend on the host
LOCAL_TZ = timezone(timedelta(hours=2))


def to_ms(*args, tz=timezone.utc) -> int:
    """Epoch ms for a datetime built from (year, month, day, ...)."""
    return int(datetime(*args, tzinfo=tz).timestamp() * 1000)


def vevent(
    uid: str | None,
    summary: str | None = "Event",
    start: str = "20240115T100000Z",
    end: str | None = "20240115T110000Z",
    extra: str = "",
) -> str:
    """One VEVENT block in CRLF form."""
    lines = ["BEGIN:VEVENT"]
    if uid is not None:
        lines.append(f"UID:{uid}")
    if summary is not None:
        lines.append(f"SUMMARY:{summary}")
    lines.append(f"DTSTART:{start}")
    if end is not None:
        lines.append(f"DTEND:{end}")
    if extra:
        lines.extend(extra.splitlines())
    lines.append("END:VEVENT")
    return "\r\n".join(lines)


def calendar(*events: str) -> str:
    """Wrap VEVENT blocks in a VCALENDAR envelope."""
    return "\r\n".join(
        ["BEGIN:VCALENDAR", "VERSION:2.0", "PRODID:-//test//EN", *events, "END:VCALENDAR", ""]
    )


class FakeClock:
    """Callable clock returning a settable epoch-ms instant."""

    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeFetcher:
    """Fetcher returning queued responses per URL and recording calls."""

    def __init__(self):
        self.responses: dict[str, list] = {}
        self.calls: list[dict] = []

    def respond(self, url: str, *responses) -> None:
        """Queue responses (FetchResult or exception); the last one repeats."""
        self.responses[url] = list(responses)

    def serve(self, url: str, body: str, etag: str | None = None, last_modified: str | None = None):
        self.respond(url, FetchResult(status_code=200, body=body, etag=etag, last_modified=last_modified))

    def fetch(self, url, etag=None, last_modified=None):
        self.calls.append({"url": url, "etag": etag, "last_modified": last_modified})
        queue = self.responses.get(url)
        if not queue:
            raise FetchFailedError("HTTP 404: Not Found", status_code=404)
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def event_store():
    return MemoryEventStore()


@pytest.fixture
def subscription_store():
    return MemorySubscriptionRegistry()


@pytest.fixture
def token_store():
    return MemoryFeedTokenStore()


@pytest.fixture
def config(tmp_path):
    return SyncConfig(
        data_dir=tmp_path / "data",
        store_backend="memory",
        log_dir=tmp_path / "logs",
    )


@pytest.fixture
def context(config, event_store, subscription_store, token_store, fetcher, clock):
    """AppContext wired with in-memory stores, a fake fetcher, and a fixed clock."""
    return AppContext(
        config=config,
        events=event_store,
        subscriptions=subscription_store,
        tokens=token_store,
        fetcher=fetcher,
        clock=clock,
        local_tz=LOCAL_TZ,
    )


@pytest.fixture
def app(context):
    """Create and configure a Flask app for testing."""
    app = create_app(context)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth():
    """Identity header accepted by the API."""
    return {"X-User-Id": "alice"}
