"""Tests for storage layer."""

import json

import pytest

from conftest import START_MS
from icalsync.exceptions import CalendarError, DuplicateEventError, NotFoundError, ValidationError
from icalsync.models import CalendarEvent, FeedToken, Subscription, SyncCounts
from icalsync.storage import (
    JsonEventStore,
    JsonFeedTokenStore,
    JsonSubscriptionRegistry,
    MemoryEventStore,
    MemoryFeedTokenStore,
    MemorySubscriptionRegistry,
)


def make_event(event_id, owner="alice", start=START_MS, **overrides):
    return CalendarEvent(id=event_id, owner_id=owner, start_time=start, end_time=start + 1, **overrides)


class TestMemoryEventStore:
    def test_list_for_owner_is_sorted(self):
        store = MemoryEventStore(
            [make_event("b", start=2), make_event("a", start=2), make_event("c", start=1)]
        )
        assert [e.id for e in store.list_for_owner("alice")] == ["c", "a", "b"]

    def test_returned_records_are_copies(self):
        store = MemoryEventStore([make_event("a")])
        event = store.get("a")
        event.title = "Changed"
        assert store.get("a").title != "Changed"

    def test_find_by_key(self):
        store = MemoryEventStore(
            [
                make_event("a", external_uid="u1", source_subscription_id="s1"),
                make_event("b", external_uid="u1", source_subscription_id="s2"),
            ]
        )
        assert store.find_by_key("alice", "s2", "u1").id == "b"
        assert store.find_by_key("bob", "s2", "u1") is None

    def test_apply_is_all_or_nothing(self):
        store = MemoryEventStore([make_event("a")])
        with pytest.raises(NotFoundError):
            store.apply(inserts=[make_event("new")], deletes=["missing"])
        assert store.get("new") is None

    def test_apply_rejects_duplicate_subscription_keys(self):
        store = MemoryEventStore(
            [make_event("a", external_uid="u1", source_subscription_id="s1")]
        )

        with pytest.raises(DuplicateEventError):
            store.apply(inserts=[make_event("b", external_uid="u1", source_subscription_id="s1")])
        with pytest.raises(DuplicateEventError):
            store.apply(
                inserts=[
                    make_event("c", external_uid="u2", source_subscription_id="s1"),
                    make_event("d", external_uid="u2", source_subscription_id="s1"),
                ]
            )
        assert [e.id for e in store.list_for_owner("alice")] == ["a"]

    def test_apply_allows_same_uid_elsewhere(self):
        store = MemoryEventStore(
            [make_event("a", external_uid="u1", source_subscription_id="s1")]
        )
        store.apply(
            inserts=[
                make_event("b", external_uid="u1", source_subscription_id="s2"),
                make_event("c", external_uid="u1", owner="bob", source_subscription_id="s1"),
                make_event("d", external_uid="u1"),
                make_event("e", external_uid="u1"),
            ]
        )
        assert store.get("e") is not None

    def test_apply_replace_in_one_batch(self):
        store = MemoryEventStore(
            [make_event("a", external_uid="u1", source_subscription_id="s1")]
        )
        store.apply(
            inserts=[make_event("b", external_uid="u1", source_subscription_id="s1")],
            deletes=["a"],
        )
        assert store.find_by_key("alice", "s1", "u1").id == "b"

    def test_update_validates_changes(self):
        store = MemoryEventStore([make_event("a", title="Kept")])

        with pytest.raises(ValidationError, match="start_time"):
            store.update("a", {"title": "Lost", "start_time": "noon"})
        assert store.get("a").title == "Kept"

        assert store.update("a", {"description": "x\ry"}).description == "x\ny"

    def test_delete_for_subscription(self):
        store = MemoryEventStore(
            [
                make_event("a", source_subscription_id="s1"),
                make_event("b", source_subscription_id="s1", owner="bob"),
                make_event("c"),
            ]
        )
        assert store.delete_for_subscription("alice", "s1") == 1
        assert [e.id for e in store.list_for_owner("alice")] == ["c"]
        assert store.get("b") is not None


def test_json_event_store_persists(tmp_path):
    """Test events survive a reload from disk."""
    store = JsonEventStore(tmp_path)
    store.insert(make_event("a", title="Persisted"))
    store.update("a", {"location": "HQ"})

    reloaded = JsonEventStore(tmp_path)
    event = reloaded.get("a")
    assert event.title == "Persisted"
    assert event.location == "HQ"

    data = json.loads((tmp_path / "events.json").read_text())
    assert data[0]["id"] == "a"


def test_json_subscription_registry_persists_counts(tmp_path):
    registry = JsonSubscriptionRegistry(tmp_path)
    registry.insert(Subscription(id="s1", owner_id="alice", remote_url="https://x/a.ics", display_name="A"))
    registry.update("s1", {"last_sync_counts": SyncCounts(added=3), "last_sync_at": 5})

    sub = JsonSubscriptionRegistry(tmp_path).get("s1")
    assert sub.last_sync_counts == SyncCounts(added=3)
    assert sub.last_sync_at == 5


def test_json_token_store_persists(tmp_path):
    store = JsonFeedTokenStore(tmp_path)
    store.insert(FeedToken(id="t1", token="secret", owner_id="alice", name="Work"))

    reloaded = JsonFeedTokenStore(tmp_path)
    assert reloaded.get_by_token("secret").id == "t1"
    reloaded.delete("t1")
    assert JsonFeedTokenStore(tmp_path).get("t1") is None


def test_json_store_missing_file_is_empty(tmp_path):
    assert JsonEventStore(tmp_path / "nested").list_for_owner("alice") == []


def test_json_store_corrupt_file(tmp_path):
    (tmp_path / "events.json").write_text("{not json")
    with pytest.raises(CalendarError, match="Corrupt"):
        JsonEventStore(tmp_path)


def test_unknown_ids_raise(tmp_path):
    registry = JsonSubscriptionRegistry(tmp_path)
    with pytest.raises(NotFoundError):
        registry.update("nope", {"color": "#000"})
    with pytest.raises(NotFoundError):
        registry.delete("nope")


def test_registry_and_token_updates_are_validated():
    registry = MemorySubscriptionRegistry(
        [Subscription(id="s1", owner_id="alice", remote_url="https://x/a.ics", display_name="A")]
    )
    with pytest.raises(ValidationError, match="sync_interval_minutes"):
        registry.update("s1", {"sync_interval_minutes": 0})
    assert registry.update("s1", {"auto_sync_enabled": "false"}).auto_sync_enabled is False

    tokens = MemoryFeedTokenStore([FeedToken(id="t1", token="secret", owner_id="alice", name="W")])
    with pytest.raises(ValidationError):
        tokens.update("t1", {"is_active": "maybe"})
    assert tokens.get("t1").is_active is True


def test_increment_access_persists(tmp_path):
    store = JsonFeedTokenStore(tmp_path)
    store.insert(FeedToken(id="t1", token="secret", owner_id="alice", name="Work"))

    store.increment_access("t1", 10)
    updated = store.increment_access("t1", 20)

    assert (updated.access_count, updated.last_accessed_at) == (2, 20)
    assert JsonFeedTokenStore(tmp_path).get("t1").access_count == 2
    with pytest.raises(NotFoundError):
        store.increment_access("nope", 30)
