"""Data models for shortlinks."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional


@dataclass
class Link:
    """Represents a link row in the store."""

    id: str
    name: str
    original_url: str
    short_code: str
    owner_id: str
    description: Optional[str] = None
    clicks: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "original_url": self.original_url,
            "short_code": self.short_code,
            "owner_id": self.owner_id,
            "description": self.description,
            "clicks": self.clicks,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Link":
        """Create from a database row or mapping."""
        return cls(
            id=record["id"],
            name=record["name"],
            original_url=record["original_url"],
            short_code=record["short_code"],
            owner_id=record["owner_id"],
            description=record.get("description"),
            clicks=record.get("clicks") or 0,
            created_at=record.get("created_at"),
            updated_at=record.get("updated_at"),
        )
