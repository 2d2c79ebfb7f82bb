from __future__ import annotations

from pydantic import BaseModel


class CacheEntry(BaseModel):
    """Previously fetched body text for a single URL."""

    key: str
    value: str  # Decoded response body
    stored_at: float  # Clock reading when the entry was written
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at
