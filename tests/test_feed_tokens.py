"""Tests for feed token management."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from icalsync.constants import DAY_MS
from icalsync.exceptions import NotFoundError, TokenInvalidError, ValidationError
from icalsync.feeds import FeedTokenManager
from icalsync.feeds.tokens import generate_token


@pytest.fixture
def manager(token_store, clock):
    return FeedTokenManager(token_store, clock=clock)


def test_generate_token_is_alphanumeric():
    token = generate_token()
    assert len(token) == 32
    assert token.isalnum()
    assert generate_token() != token


def test_create_defaults(manager, clock):
    record = manager.create("alice", "  Work  ")

    assert record.name == "Work"
    assert record.owner_id == "alice"
    assert record.is_active
    assert record.include_private is False
    assert record.expires_at is None
    assert record.access_count == 0
    assert record.created_at == clock.now


def test_create_with_expiry(manager, clock):
    record = manager.create("alice", "Temp", expires_in_days=7)
    assert record.expires_at == clock.now + 7 * DAY_MS


@pytest.mark.parametrize("days", [0, -1, True, "7"])
def test_create_rejects_bad_expiry(manager, days):
    with pytest.raises(ValidationError):
        manager.create("alice", "Temp", expires_in_days=days)


def test_create_requires_name(manager):
    with pytest.raises(ValidationError):
        manager.create("alice", "   ")


def test_public_listing_hides_token(manager):
    record = manager.create("alice", "Work")
    public = manager.list("alice")[0].to_public_dict()

    assert "token" not in public
    assert public["token_preview"] == record.token[:8] + "..."
    assert public["name"] == "Work"


def test_list_is_per_owner(manager):
    manager.create("alice", "A")
    manager.create("bob", "B")
    assert [t.name for t in manager.list("alice")] == ["A"]


def test_resolve_valid_token(manager):
    record = manager.create("alice", "Work")
    assert manager.resolve(record.token).id == record.id


def test_resolve_unknown_token(manager):
    with pytest.raises(TokenInvalidError, match="Invalid or expired token"):
        manager.resolve("nope")
    with pytest.raises(TokenInvalidError):
        manager.resolve("")


def test_resolve_revoked_token(manager):
    record = manager.create("alice", "Work")
    revoked = manager.revoke("alice", record.id)

    assert revoked.is_active is False
    with pytest.raises(TokenInvalidError):
        manager.resolve(record.token)
    assert manager.list("alice")[0].is_active is False


def test_resolve_expired_token(manager, clock):
    record = manager.create("alice", "Temp", expires_in_days=1)

    clock.advance(DAY_MS)
    assert manager.resolve(record.token).id == record.id

    clock.advance(1)
    with pytest.raises(TokenInvalidError):
        manager.resolve(record.token)


def test_other_owner_cannot_manage_token(manager):
    record = manager.create("alice", "Work")
    with pytest.raises(NotFoundError):
        manager.revoke("bob", record.id)
    with pytest.raises(NotFoundError):
        manager.delete("bob", record.id)
    assert manager.resolve(record.token)


def test_delete(manager):
    record = manager.create("alice", "Work")
    manager.delete("alice", record.id)

    assert manager.list("alice") == []
    with pytest.raises(TokenInvalidError):
        manager.resolve(record.token)
    with pytest.raises(NotFoundError):
        manager.get("alice", record.id)


def test_record_access(manager, clock):
    record = manager.create("alice", "Work")
    clock.advance(5000)

    manager.record_access(record)
    updated = manager.record_access(record)

    assert updated.access_count == 2
    assert updated.last_accessed_at == clock.now


def test_concurrent_access_is_counted_once_each(manager, token_store):
    record = manager.create("alice", "Work")

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda _: manager.record_access(record), range(200)))

    assert token_store.get(record.id).access_count == 200


def test_record_access_for_deleted_token(manager):
    record = manager.create("alice", "Work")
    manager.delete("alice", record.id)

    with pytest.raises(NotFoundError):
        manager.record_access(record)
