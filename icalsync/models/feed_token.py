"""Feed token model."""

from pydantic import BaseModel, Field

from icalsync.constants import FEED_TOKEN_PREVIEW_LENGTH
from icalsync.utils import new_id


class FeedToken(BaseModel):
    """Capability granting unauthenticated read access to one user's feed."""

    id: str = Field(default_factory=new_id)
    token: str
    owner_id: str
    name: str
    include_private: bool = False
    is_active: bool = True
    expires_at: int | None = None
    access_count: int = 0
    last_accessed_at: int | None = None
    created_at: int = 0

    def is_valid(self, now: int) -> bool:
        """True if the token is active and not expired."""
        if not self.is_active:
            return False
        return self.expires_at is None or self.expires_at >= now

    @property
    def preview(self) -> str:
        """Partial token value for identification in listings."""
        return self.token[:FEED_TOKEN_PREVIEW_LENGTH] + "..."

    def to_public_dict(self) -> dict:
        """Listing view without the secret token value."""
        data = self.model_dump(exclude={"token"})
        data["token_preview"] = self.preview
        return data
