"""Repository interfaces for user item data access operations."""

import uuid
from typing import Any, Dict, Iterable, List, Optional, Protocol

from ..models.domain import Record


class UserItemRepository(Protocol):
    """Interface for user item repository operations."""

    def create_profile(
        self,
        user_id: str,
        attributes: Dict[str, Any],
        sort_key: Optional[str] = None,
        expires_at: Optional[int] = None,
    ) -> Record:
        """Store a profile item for a user.

        Args:
            user_id: The user the profile belongs to.
            attributes: Profile attributes (name, email, age, ...).
            sort_key: Explicit sort key; ``PROFILE#<ts>`` when omitted.
            expires_at: Optional TTL timestamp.
        Returns:
            The stored record.
        """
        ...

    def add_detail(
        self,
        user_id: str,
        detail_type: str,
        attributes: Dict[str, Any],
        expires_at: Optional[int] = None,
    ) -> Record:
        """Store a ``DETAIL#<type>#<ts>`` item for a user."""
        ...

    def add_activity(
        self,
        user_id: str,
        activity_type: str,
        attributes: Dict[str, Any],
        expires_at: Optional[int] = None,
    ) -> Record:
        """Store an ``ACTIVITY#<type>#<ts>`` item for a user."""
        ...

    def get_item(self, user_id: str, sort_key: str) -> Record:
        """Retrieve one item.

        Raises:
            RecordNotFoundError: If the item does not exist or has expired.
        """
        ...

    def query_user(self, user_id: str, sort_key_prefix: Optional[str] = None) -> List[Record]:
        """List a user's items, optionally restricted to a sort key prefix."""
        ...

    def query_by_sort(self, sort_key_prefix: str) -> List[Record]:
        """List items of every user whose sort key starts with the prefix."""
        ...

    def list_items(self) -> List[Record]:
        """List every item in the table (full scan)."""
        ...

    def update_item(
        self,
        user_id: str,
        sort_key: str,
        set_fields: Dict[str, Any],
        remove_fields: Iterable[str],
    ) -> Record:
        """Patch fields of an item and return the updated record.

        Raises:
            RecordNotFoundError: If the item does not exist.
        """
        ...

    def delete_item(self, user_id: str, sort_key: str) -> bool:
        """Delete an item; returns False if there was nothing to delete."""
        ...


def generate_user_id() -> str:
    """Generate a unique user ID.

    Returns:
        A random UUID4 string
    """
    return str(uuid.uuid4())
