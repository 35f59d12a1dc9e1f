"""Data models for URL shortener."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


@dataclass
class Mapping:
    """Represents a slug to URL mapping in the store."""

    slug: str
    original_url: str
    short_url: str
    created_at: Optional[datetime] = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "slug": self.slug,
            "original_url": self.original_url,
            "short_url": self.short_url,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Mapping":
        """Create from dictionary."""
        created_at = data.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return cls(
            slug=data["slug"],
            original_url=data["original_url"],
            short_url=data["short_url"],
            created_at=created_at,
        )
