"""Business logic service for shortlinks."""

import asyncio
import logging
from typing import Optional, Dict, Any, List

from .shortcode import ShortCodeGenerator
from .database.base import LinkStoreBase
from .database.cache import RedisCache
from .database.models import Link
from .common.validators import is_valid_url, is_valid_name, is_valid_description
from .errors import (
    AllocationExhausted,
    LinkNotFound,
    ShortCodeConflict,
    StoreUnavailable,
    ValidationError,
)


class LinkService:
    """Service layer for link allocation, redirects and owner CRUD."""

    def __init__(
        self,
        db: LinkStoreBase,
        cache: Optional[RedisCache] = None,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        logger: Optional[logging.Logger] = None,
        max_allocation_attempts: int = 10,
        store_timeout_seconds: float = 5.0,
    ):
        """Initialize link service.

        Args:
            db: Link store
            cache: Optional redirect cache
            short_code_generator: Optional short code generator
            logger: Optional logger
            max_allocation_attempts: Code draws allowed per creation
            store_timeout_seconds: Upper bound for each store call
        """
        self.db = db
        self.cache = cache
        self.generator = short_code_generator or ShortCodeGenerator()
        self.logger = logger or logging.getLogger(__name__)
        self.max_allocation_attempts = max_allocation_attempts
        self.store_timeout_seconds = store_timeout_seconds

    async def _call(self, awaitable):
        """Run a store call under the configured timeout."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self.store_timeout_seconds)
        except asyncio.TimeoutError as e:
            raise StoreUnavailable(
                f"Store operation timed out after {self.store_timeout_seconds}s"
            ) from e

    async def create_link(
        self,
        name: str,
        original_url: str,
        owner_id: str,
        description: Optional[str] = None,
    ) -> Link:
        """Create a link under a freshly allocated short code.

        Each attempt draws a random code, skips it if the store already
        has it, and otherwise tries the insert. The store's unique
        constraint is the authority: a conflict at insert time counts as
        a collision and the loop draws again.

        Args:
            name: Display name
            original_url: Redirect target
            owner_id: Owning user id
            description: Optional description

        Returns:
            The persisted link

        Raises:
            ValidationError: If any field is invalid
            AllocationExhausted: If every attempt collided
            StoreUnavailable: If the store fails or times out
        """
        owner_id = self._require_owner(owner_id)
        name = self._clean_name(name)
        original_url = self._clean_url(original_url)
        description = self._clean_description(description)

        for attempt in range(1, self.max_allocation_attempts + 1):
            code = self.generator.generate_random()

            if await self._call(self.db.short_code_exists(code)):
                self.logger.debug(f"Short code collision on attempt {attempt}: {code}")
                continue

            try:
                link = await self._call(self.db.insert_link(
                    name=name,
                    original_url=original_url,
                    short_code=code,
                    owner_id=owner_id,
                    description=description,
                ))
            except ShortCodeConflict:
                self.logger.warning(f"Short code claimed concurrently on attempt {attempt}: {code}")
                continue

            if self.cache:
                await self.cache.set_link(link.short_code, link.id, link.original_url)

            self.logger.info(f"Created link {link.id}: {link.short_code} -> {link.original_url}")
            return link

        self.logger.error(f"Short code allocation exhausted after {self.max_allocation_attempts} attempts")
        raise AllocationExhausted(self.max_allocation_attempts)

    async def resolve(self, short_code: str) -> str:
        """Resolve a short code to its redirect target and count the visit.

        The click is recorded before returning, but a failure to record
        it is only logged; the redirect still happens.

        Args:
            short_code: The short code to lookup

        Returns:
            Original URL

        Raises:
            LinkNotFound: If no link has this code
            StoreUnavailable: If the lookup fails or times out
        """
        if not self.generator.is_valid_format(short_code, self.generator.length):
            # Codes of any other shape are never allocated
            self.logger.info(f"Rejected malformed short code: {short_code!r}")
            raise LinkNotFound(f"Short code '{short_code}' not found")

        if self.cache:
            cached = await self.cache.get_link(short_code)
            if cached:
                self.logger.debug(f"Cache hit for {short_code}")
                if await self._record_click(cached["id"], short_code) is not False:
                    return cached["original_url"]
                # Link vanished behind a stale entry
                await self.cache.delete(short_code)

        link = await self._call(self.db.get_link_by_short_code(short_code))

        if link is None:
            self.logger.info(f"Short code not found: {short_code}")
            raise LinkNotFound(f"Short code '{short_code}' not found")

        if self.cache:
            await self.cache.set_link(link.short_code, link.id, link.original_url)

        await self._record_click(link.id, short_code)
        self.logger.debug(f"Resolved {short_code} -> {link.original_url}")
        return link.original_url

    async def _record_click(self, link_id: str, short_code: str) -> Optional[bool]:
        """Increment the click counter, returning None if it could not be persisted."""
        try:
            return await self._call(self.db.increment_clicks(link_id))
        except Exception:
            self.logger.exception(f"Failed to record click for {short_code}")
            return None

    async def list_links(self, owner_id: str) -> List[Link]:
        """List an owner's links, newest first."""
        owner_id = self._require_owner(owner_id)
        return await self._call(self.db.list_links(owner_id))

    async def get_link(self, link_id: str, owner_id: str) -> Link:
        """Get one of an owner's links.

        Raises:
            LinkNotFound: If the link does not exist or belongs to someone else
        """
        owner_id = self._require_owner(owner_id)
        link = await self._call(self.db.get_link(link_id, owner_id))

        if link is None:
            raise LinkNotFound(f"Link '{link_id}' not found")
        return link

    async def update_link(
        self,
        link_id: str,
        owner_id: str,
        name: Optional[str] = None,
        original_url: Optional[str] = None,
        description: Optional[str] = None,
        clear_description: bool = False,
    ) -> Link:
        """Update name, target URL and/or description of an owner's link.

        Fields passed as None keep their current value; clear_description
        sets the description to null. The short code and owner never change.

        Raises:
            ValidationError: If a supplied field is invalid
            LinkNotFound: If the link does not exist or belongs to someone else
        """
        owner_id = self._require_owner(owner_id)
        if name is not None:
            name = self._clean_name(name)
        if original_url is not None:
            original_url = self._clean_url(original_url)
        if description is not None:
            description = self._clean_description(description)

        link = await self._call(self.db.update_link(
            link_id,
            owner_id,
            name=name,
            original_url=original_url,
            description=description,
            clear_description=clear_description,
        ))

        if link is None:
            raise LinkNotFound(f"Link '{link_id}' not found")

        if self.cache:
            await self.cache.delete(link.short_code)

        self.logger.info(f"Updated link {link.id} ({link.short_code})")
        return link

    async def delete_link(self, link_id: str, owner_id: str) -> Link:
        """Delete an owner's link.

        Raises:
            LinkNotFound: If the link does not exist or belongs to someone else
        """
        owner_id = self._require_owner(owner_id)
        link = await self._call(self.db.delete_link(link_id, owner_id))

        if link is None:
            raise LinkNotFound(f"Link '{link_id}' not found")

        if self.cache:
            await self.cache.delete(link.short_code)

        self.logger.info(f"Deleted link {link.id} ({link.short_code})")
        return link

    async def get_statistics(self, owner_id: str) -> Dict[str, Any]:
        """Get link count and total clicks for an owner."""
        owner_id = self._require_owner(owner_id)
        return await self._call(self.db.get_statistics(owner_id))

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        try:
            db_healthy = await self._call(self.db.health_check())
        except StoreUnavailable as e:
            self.logger.error(f"Store health check failed: {e}")
            db_healthy = False

        cache_healthy = True
        if self.cache and self.cache.enabled:
            cache_healthy = await self.cache.ping()

        return {
            "database": db_healthy,
            "cache": cache_healthy,
            "overall": db_healthy and cache_healthy,
        }

    async def close(self) -> None:
        """Close service connections."""
        await self.db.close()
        if self.cache:
            await self.cache.close()

    @staticmethod
    def _require_owner(owner_id: str) -> str:
        if not owner_id or not isinstance(owner_id, str) or not owner_id.strip():
            raise ValidationError("Owner id is required", field="owner_id")
        return owner_id.strip()

    @staticmethod
    def _clean_name(name: str) -> str:
        name = name.strip() if isinstance(name, str) else name
        ok, error = is_valid_name(name)
        if not ok:
            raise ValidationError(error, field="name")
        return name

    @staticmethod
    def _clean_url(original_url: str) -> str:
        original_url = original_url.strip() if isinstance(original_url, str) else original_url
        ok, error = is_valid_url(original_url)
        if not ok:
            raise ValidationError(f"Invalid URL: {error}", field="originalUrl")
        return original_url

    @staticmethod
    def _clean_description(description: Optional[str]) -> Optional[str]:
        if isinstance(description, str):
            description = description.strip()
        ok, error = is_valid_description(description)
        if not ok:
            raise ValidationError(error, field="description")
        return description
