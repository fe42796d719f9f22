"""Record store implementation of the user item repository.

Every user owns one partition. The sort key encodes the entity kind so one
partition holds a profile, its details and its activity log side by side.
"""

from typing import Any, Dict, Iterable, List, Optional

from ..engine.keys import sort_key_for
from ..engine.record_store import RecordStore
from ..middleware.exceptions import RecordNotFoundError
from ..models.domain import EXPIRES_AT, EntityKind, Record


class StoreUserItemRepository:
    """Record store implementation of user item repository operations."""

    def __init__(self, record_store: RecordStore) -> None:
        """Initialize the repository with a record store.

        Args:
            record_store: The store handle shared by the process
        """
        self.record_store = record_store

    def entity_sort_key(self, kind: EntityKind, subtype: Optional[str] = None) -> str:
        """Create a sort key for a new entity stamped with the store clock.

        Args:
            kind: The entity kind
            subtype: Detail or activity type

        Returns:
            Formatted sort key
        """
        return sort_key_for(kind, subtype, self.record_store.now())

    def _save_entity(
        self,
        user_id: str,
        kind: EntityKind,
        subtype: Optional[str],
        attributes: Dict[str, Any],
        sort_key: Optional[str] = None,
        expires_at: Optional[int] = None,
    ) -> Record:
        item = {**attributes, "itemType": kind.value}
        if kind.subtype_attribute and subtype is not None:
            item[kind.subtype_attribute] = subtype
        if expires_at is not None:
            item[EXPIRES_AT] = expires_at
        return self.record_store.put(
            user_id, sort_key or self.entity_sort_key(kind, subtype), item
        )

    def create_profile(
        self,
        user_id: str,
        attributes: Dict[str, Any],
        sort_key: Optional[str] = None,
        expires_at: Optional[int] = None,
    ) -> Record:
        return self._save_entity(
            user_id, EntityKind.PROFILE, None, attributes, sort_key, expires_at
        )

    def add_detail(
        self,
        user_id: str,
        detail_type: str,
        attributes: Dict[str, Any],
        expires_at: Optional[int] = None,
    ) -> Record:
        return self._save_entity(
            user_id, EntityKind.DETAIL, detail_type, attributes, expires_at=expires_at
        )

    def add_activity(
        self,
        user_id: str,
        activity_type: str,
        attributes: Dict[str, Any],
        expires_at: Optional[int] = None,
    ) -> Record:
        return self._save_entity(
            user_id, EntityKind.ACTIVITY, activity_type, attributes, expires_at=expires_at
        )

    def get_item(self, user_id: str, sort_key: str) -> Record:
        record = self.record_store.get(user_id, sort_key)
        if record is None:
            raise RecordNotFoundError(
                user_id,
                sort_key,
                message=f"Item with userId {user_id} and sk {sort_key} not found",
            )
        return record

    def query_user(self, user_id: str, sort_key_prefix: Optional[str] = None) -> List[Record]:
        return self.record_store.query_by_partition(user_id, sort_key_prefix)

    def query_by_sort(self, sort_key_prefix: str) -> List[Record]:
        return self.record_store.query_by_sort_prefix(sort_key_prefix)

    def list_items(self) -> List[Record]:
        return self.record_store.scan()

    def update_item(
        self,
        user_id: str,
        sort_key: str,
        set_fields: Dict[str, Any],
        remove_fields: Iterable[str],
    ) -> Record:
        return self.record_store.patch(user_id, sort_key, set_fields, remove_fields)

    def delete_item(self, user_id: str, sort_key: str) -> bool:
        return self.record_store.delete(user_id, sort_key)
