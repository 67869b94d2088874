"""In-process link store for local development and tests."""

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from .base import LinkStoreBase
from .models import Link
from ..errors import ShortCodeConflict


class InMemoryLinkStore(LinkStoreBase):
    """Dict-backed link store.

    No operation awaits between reading and writing its maps, so every
    call is atomic with respect to other tasks on the event loop.
    Returned links are copies; callers cannot mutate stored state.
    """

    def __init__(self, db_config: str = "memory://", logger: Optional[logging.Logger] = None):
        super().__init__(db_config)
        self.logger = logger or logging.getLogger(__name__)
        self._links: Dict[str, Link] = {}
        self._by_code: Dict[str, str] = {}

    async def insert_link(
        self,
        name: str,
        original_url: str,
        short_code: str,
        owner_id: str,
        description: Optional[str] = None,
    ) -> Link:
        if short_code in self._by_code:
            raise ShortCodeConflict(short_code)

        now = datetime.now(timezone.utc)
        link = Link(
            id=uuid.uuid4().hex,
            name=name,
            original_url=original_url,
            short_code=short_code,
            owner_id=owner_id,
            description=description,
            clicks=0,
            created_at=now,
            updated_at=now,
        )
        self._links[link.id] = link
        self._by_code[short_code] = link.id
        return replace(link)

    async def short_code_exists(self, short_code: str) -> bool:
        return short_code in self._by_code

    async def get_link_by_short_code(self, short_code: str) -> Optional[Link]:
        link_id = self._by_code.get(short_code)
        if link_id is None:
            return None
        return replace(self._links[link_id])

    async def increment_clicks(self, link_id: str) -> bool:
        link = self._links.get(link_id)
        if link is None:
            self.logger.warning(f"Cannot increment clicks - link not found: {link_id}")
            return False
        link.clicks += 1
        return True

    def _owned(self, link_id: str, owner_id: str) -> Optional[Link]:
        link = self._links.get(link_id)
        if link is None or link.owner_id != owner_id:
            return None
        return link

    async def get_link(self, link_id: str, owner_id: str) -> Optional[Link]:
        link = self._owned(link_id, owner_id)
        return replace(link) if link else None

    async def list_links(self, owner_id: str) -> List[Link]:
        owned = [link for link in self._links.values() if link.owner_id == owner_id]
        # Insertion order breaks created_at ties
        owned = list(reversed(owned))
        owned.sort(key=lambda link: link.created_at, reverse=True)
        return [replace(link) for link in owned]

    async def update_link(
        self,
        link_id: str,
        owner_id: str,
        name: Optional[str] = None,
        original_url: Optional[str] = None,
        description: Optional[str] = None,
        clear_description: bool = False,
    ) -> Optional[Link]:
        link = self._owned(link_id, owner_id)
        if link is None:
            return None

        if name is not None:
            link.name = name
        if original_url is not None:
            link.original_url = original_url
        if clear_description:
            link.description = None
        elif description is not None:
            link.description = description
        link.updated_at = datetime.now(timezone.utc)
        return replace(link)

    async def delete_link(self, link_id: str, owner_id: str) -> Optional[Link]:
        link = self._owned(link_id, owner_id)
        if link is None:
            return None

        del self._links[link_id]
        del self._by_code[link.short_code]
        return link

    async def get_statistics(self, owner_id: str) -> Dict[str, Any]:
        owned = [link for link in self._links.values() if link.owner_id == owner_id]
        return {
            "total_links": len(owned),
            "total_clicks": sum(link.clicks for link in owned),
        }

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        self._links.clear()
        self._by_code.clear()
