"""Abstract base class for link store implementations."""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any

from .models import Link


class LinkStoreBase(ABC):
    """Abstract base class for link store operations.

    Implementations must enforce short code uniqueness themselves and
    apply click increments atomically. Connection failures are reported
    as ``StoreUnavailable``.
    """

    def __init__(self, db_config: str):
        """Initialize store.

        Args:
            db_config: Store connection string
        """
        self.db_config = db_config

    @abstractmethod
    async def insert_link(
        self,
        name: str,
        original_url: str,
        short_code: str,
        owner_id: str,
        description: Optional[str] = None,
    ) -> Link:
        """Insert a new link with a freshly assigned id.

        Args:
            name: Display name
            original_url: Redirect target
            short_code: Code to claim
            owner_id: Owning user id
            description: Optional description

        Returns:
            The stored link

        Raises:
            ShortCodeConflict: If the short code is already taken
        """
        pass

    @abstractmethod
    async def short_code_exists(self, short_code: str) -> bool:
        """Check if a short code already exists.

        Args:
            short_code: The short code to check

        Returns:
            True if exists, False otherwise
        """
        pass

    @abstractmethod
    async def get_link_by_short_code(self, short_code: str) -> Optional[Link]:
        """Exact-match lookup by short code.

        Args:
            short_code: The short code to lookup

        Returns:
            The link if found, None otherwise
        """
        pass

    @abstractmethod
    async def increment_clicks(self, link_id: str) -> bool:
        """Atomically add one to a link's click counter.

        Args:
            link_id: The link to update

        Returns:
            True if a link was updated, False if it no longer exists
        """
        pass

    @abstractmethod
    async def get_link(self, link_id: str, owner_id: str) -> Optional[Link]:
        """Get a link by id, scoped to its owner."""
        pass

    @abstractmethod
    async def list_links(self, owner_id: str) -> List[Link]:
        """List an owner's links, newest first."""
        pass

    @abstractmethod
    async def update_link(
        self,
        link_id: str,
        owner_id: str,
        name: Optional[str] = None,
        original_url: Optional[str] = None,
        description: Optional[str] = None,
        clear_description: bool = False,
    ) -> Optional[Link]:
        """Update the editable fields of an owner's link.

        Fields passed as None are left unchanged. clear_description sets
        the description to NULL and takes precedence over description.

        Returns:
            The updated link, or None if not found for this owner
        """
        pass

    @abstractmethod
    async def delete_link(self, link_id: str, owner_id: str) -> Optional[Link]:
        """Delete an owner's link.

        Returns:
            The deleted link, or None if not found for this owner
        """
        pass

    @abstractmethod
    async def get_statistics(self, owner_id: str) -> Dict[str, Any]:
        """Get link statistics for an owner.

        Returns:
            Dictionary with total_links and total_clicks
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close store connections."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is healthy.

        Returns:
            True if healthy, False otherwise
        """
        pass
