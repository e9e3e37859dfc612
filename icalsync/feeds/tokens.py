"""Feed token lifecycle: create, list, revoke, delete, resolve."""

import logging
import secrets
import string

from icalsync.constants import DAY_MS, FEED_TOKEN_LENGTH
from icalsync.exceptions import NotFoundError, TokenInvalidError, ValidationError
from icalsync.models.feed_token import FeedToken
from icalsync.storage.base import FeedTokenStore
from icalsync.utils import Clock, now_ms

logger = logging.getLogger(__name__)

_TOKEN_ALPHABET = string.ascii_letters + string.digits


def generate_token(length: int = FEED_TOKEN_LENGTH) -> str:
    """Random alphanumeric token value."""
    return "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(length))


class FeedTokenManager:
    """Manages the capability tokens that expose a user's feed."""

    def __init__(self, store: FeedTokenStore, clock: Clock = now_ms):
        self.store = store
        self.clock = clock

    def create(
        self,
        owner_id: str,
        name: str,
        include_private: bool = False,
        expires_in_days: int | None = None,
    ) -> FeedToken:
        """Create a token. The returned record is the only place the value is exposed."""
        name = name.strip()
        if not name:
            raise ValidationError("Feed name is required")
        if expires_in_days is not None:
            if not isinstance(expires_in_days, int) or isinstance(expires_in_days, bool):
                raise ValidationError("expires_in_days must be an integer")
            if expires_in_days <= 0:
                raise ValidationError("expires_in_days must be positive")

        now = self.clock()
        token = generate_token()
        while self.store.get_by_token(token) is not None:
            token = generate_token()

        record = FeedToken(
            token=token,
            owner_id=owner_id,
            name=name,
            include_private=include_private,
            expires_at=now + expires_in_days * DAY_MS if expires_in_days else None,
            created_at=now,
        )
        self.store.insert(record)
        logger.info(f"Created feed token '{name}' ({record.id}) for {owner_id}")
        return record

    def list(self, owner_id: str) -> list[FeedToken]:
        return self.store.list_for_owner(owner_id)

    def get(self, owner_id: str, token_id: str) -> FeedToken:
        """Get an owner's token record.

        Raises:
            NotFoundError: If absent or owned by someone else
        """
        record = self.store.get(token_id)
        if record is None or record.owner_id != owner_id:
            raise NotFoundError("Token not found")
        return record

    def revoke(self, owner_id: str, token_id: str) -> FeedToken:
        """Deactivate a token; the record stays for the owner's listing."""
        self.get(owner_id, token_id)
        logger.info(f"Revoked feed token {token_id}")
        return self.store.update(token_id, {"is_active": False})

    def delete(self, owner_id: str, token_id: str) -> None:
        self.get(owner_id, token_id)
        self.store.delete(token_id)
        logger.info(f"Deleted feed token {token_id}")

    def resolve(self, token: str) -> FeedToken:
        """Resolve a token value for public feed access.

        Raises:
            TokenInvalidError: If the token is unknown, revoked, or expired
        """
        record = self.store.get_by_token(token) if token else None
        if record is None or not record.is_valid(self.clock()):
            raise TokenInvalidError("Invalid or expired token")
        return record

    def record_access(self, record: FeedToken) -> FeedToken:
        """Count one full (non-304) feed download."""
        return self.store.increment_access(record.id, self.clock())
