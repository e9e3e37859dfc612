"""Tests for subscription management."""

import threading

import pytest

from conftest import calendar, vevent
from icalsync.exceptions import DuplicateSubscriptionError, NotFoundError, ValidationError
from icalsync.subscriptions import SubscriptionManager, validate_feed_url
from icalsync.sync import ReconciliationEngine, SubscriptionLocks

URL = "https://example.com/team.ics"


@pytest.fixture
def manager(subscription_store, event_store, clock):
    return SubscriptionManager(subscription_store, event_store, clock=clock)


@pytest.mark.parametrize(
    "url",
    ["https://example.com/a.ics", "http://example.com/a", "webcal://example.com/a.ics", " WEBCALS://x.org/c "],
)
def test_valid_feed_urls(url):
    assert validate_feed_url(url) == url.strip()


@pytest.mark.parametrize("url", ["", "example.com/a.ics", "ftp://example.com/a.ics", "https://", None])
def test_invalid_feed_urls(url):
    with pytest.raises(ValidationError):
        validate_feed_url(url)


def test_create_defaults(manager, clock):
    sub = manager.create("alice", URL)

    assert sub.owner_id == "alice"
    assert sub.display_name == "example.com"
    assert sub.auto_sync_enabled is True
    assert sub.sync_interval_minutes == 60
    assert sub.color == "#34a853"
    assert sub.created_at == clock.now
    assert sub.last_sync_at is None


def test_create_with_options(manager):
    sub = manager.create(
        "alice", URL, display_name="Team", color="#123456", auto_sync_enabled=False, sync_interval_minutes=15
    )
    assert (sub.display_name, sub.color, sub.auto_sync_enabled, sub.sync_interval_minutes) == (
        "Team",
        "#123456",
        False,
        15,
    )


def test_duplicate_url_rejected_per_owner(manager):
    manager.create("alice", URL)

    with pytest.raises(DuplicateSubscriptionError, match="already exists"):
        manager.create("alice", URL)
    assert manager.create("bob", URL).owner_id == "bob"


@pytest.mark.parametrize("interval", [0, -5, "often"])
def test_bad_interval_rejected(manager, interval):
    with pytest.raises(ValidationError):
        manager.create("alice", URL, sync_interval_minutes=interval)


def test_list_is_per_owner(manager):
    manager.create("alice", URL)
    manager.create("bob", "https://example.com/bob.ics")
    assert [s.remote_url for s in manager.list("alice")] == [URL]


def test_get_hides_other_owners(manager):
    sub = manager.create("alice", URL)
    with pytest.raises(NotFoundError):
        manager.get("bob", sub.id)


def test_update_fields(manager):
    sub = manager.create("alice", URL)

    updated = manager.update("alice", sub.id, display_name="Renamed", auto_sync_enabled=False, color=None)

    assert updated.display_name == "Renamed"
    assert updated.auto_sync_enabled is False
    assert updated.color == sub.color


def test_update_rejects_sync_metadata(manager):
    sub = manager.create("alice", URL)
    with pytest.raises(ValidationError, match="cached_etag"):
        manager.update("alice", sub.id, cached_etag='"x"')


def test_update_coerces_string_flags(manager, clock):
    sub = manager.create("alice", URL)

    updated = manager.update("alice", sub.id, auto_sync_enabled="false")

    assert updated.auto_sync_enabled is False
    assert updated.is_due(clock.now) is False


@pytest.mark.parametrize(
    "changes",
    [{"auto_sync_enabled": "sometimes"}, {"color": 5}, {"display_name": ["x"]}, {"remote_url": 7}],
)
def test_update_rejects_bad_types(manager, subscription_store, changes):
    sub = manager.create("alice", URL)

    with pytest.raises(ValidationError):
        manager.update("alice", sub.id, **changes)
    assert subscription_store.get(sub.id) == sub


@pytest.mark.parametrize("changes", [{"color": 5}, {"auto_sync_enabled": "sometimes"}, {"remote_url": None}])
def test_create_rejects_bad_types(manager, changes):
    fields = {"remote_url": URL, **changes}
    with pytest.raises(ValidationError):
        manager.create("alice", **fields)


def test_update_url_resets_validators(manager, subscription_store):
    sub = manager.create("alice", URL)
    subscription_store.update(sub.id, {"cached_etag": '"v1"', "cached_last_modified": "x"})

    updated = manager.update("alice", sub.id, remote_url="https://example.com/new.ics")

    assert updated.remote_url == "https://example.com/new.ics"
    assert updated.cached_etag is None
    assert updated.cached_last_modified is None


def test_update_same_url_keeps_validators(manager, subscription_store):
    sub = manager.create("alice", URL)
    subscription_store.update(sub.id, {"cached_etag": '"v1"'})

    assert manager.update("alice", sub.id, remote_url=URL).cached_etag == '"v1"'


def test_update_url_to_existing_rejected(manager):
    manager.create("alice", URL)
    other = manager.create("alice", "https://example.com/other.ics")
    with pytest.raises(DuplicateSubscriptionError):
        manager.update("alice", other.id, remote_url=URL)


def test_update_blank_name_rejected(manager):
    sub = manager.create("alice", URL)
    with pytest.raises(ValidationError):
        manager.update("alice", sub.id, display_name="  ")


def test_delete_cascades_to_events(manager, subscription_store, event_store, fetcher, clock):
    sub = manager.create("alice", URL)
    keep = manager.create("alice", "https://example.com/keep.ics")
    fetcher.serve(URL, calendar(vevent("a"), vevent("b")))
    fetcher.serve(keep.remote_url, calendar(vevent("k")))
    engine = ReconciliationEngine(event_store, subscription_store, fetcher, clock=clock)
    engine.sync(sub)
    engine.sync(keep)

    removed = manager.delete("alice", sub.id)

    assert removed == 2
    assert subscription_store.get(sub.id) is None
    assert [e.external_uid for e in event_store.list_for_owner("alice")] == ["k"]


def test_delete_other_owner_rejected(manager):
    sub = manager.create("alice", URL)
    with pytest.raises(NotFoundError):
        manager.delete("bob", sub.id)


def test_delete_waits_for_running_sync(subscription_store, event_store, clock):
    locks = SubscriptionLocks()
    manager = SubscriptionManager(subscription_store, event_store, clock=clock, locks=locks)
    sub = manager.create("alice", URL)
    removed = []

    with locks.get(sub.id):
        worker = threading.Thread(target=lambda: removed.append(manager.delete("alice", sub.id)))
        worker.start()
        worker.join(timeout=0.2)
        assert worker.is_alive()
        assert subscription_store.get(sub.id) is not None

    worker.join()
    assert removed == [0]
    assert subscription_store.get(sub.id) is None
    assert len(locks) == 0
