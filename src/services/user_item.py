"""Service translating API requests into user item repository calls."""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..models.api.requests import (
    AddActivityRequest,
    AddDetailRequest,
    CreateProfileRequest,
    ItemKeyRequest,
    QueryBySortRequest,
    QueryUserRequest,
    UpdateItemRequest,
)
from ..models.domain import EXPIRES_AT, Patch, Record
from ..repositories.user_item import UserItemRepository, generate_user_id
from ..utils.timestamps import utc_now
from ..utils.ttl import calculate_ttl


_UPDATABLE_FIELDS = frozenset({"name", "email", "age", "description"})


def _present(**fields: Any) -> Dict[str, Any]:
    return {name: value for name, value in fields.items() if value is not None}


class UserItemService:
    """Service for creating, reading, updating and deleting user items."""

    def __init__(
        self,
        repository: UserItemRepository,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the service.

        Args:
            repository: Repository for user item persistence
            clock: Source of the current time for TTL arithmetic
        """
        self.repository = repository
        self.clock = clock

    def _expires_at(self, ttl: Optional[int]) -> Optional[int]:
        if ttl is None:
            return None
        return calculate_ttl(ttl, now=self.clock())

    def create_profile(self, request: CreateProfileRequest) -> Record:
        attributes = {
            **request.extra_attributes(),
            **_present(name=request.name, email=request.email, age=request.age),
        }
        return self.repository.create_profile(
            user_id=request.user_id or generate_user_id(),
            attributes=attributes,
            sort_key=request.sk,
            expires_at=self._expires_at(request.ttl),
        )

    def add_detail(self, request: AddDetailRequest) -> Record:
        attributes = {
            **request.extra_attributes(),
            **_present(description=request.description),
        }
        return self.repository.add_detail(
            user_id=request.user_id,
            detail_type=request.detail_type,
            attributes=attributes,
            expires_at=self._expires_at(request.ttl),
        )

    def add_activity(self, request: AddActivityRequest) -> Record:
        attributes = {
            **request.extra_attributes(),
            **_present(description=request.description),
        }
        return self.repository.add_activity(
            user_id=request.user_id,
            activity_type=request.activity_type,
            attributes=attributes,
            expires_at=self._expires_at(request.ttl),
        )

    def get_item(self, request: ItemKeyRequest) -> Record:
        return self.repository.get_item(request.user_id, request.sk)

    def query_user(self, request: QueryUserRequest) -> List[Record]:
        return self.repository.query_user(request.user_id, request.sk_prefix)

    def query_by_sort(self, request: QueryBySortRequest) -> List[Record]:
        return self.repository.query_by_sort(request.sk_prefix)

    def list_items(self) -> List[Record]:
        return self.repository.list_items()

    def update_item(self, request: UpdateItemRequest) -> Tuple[Record, Patch]:
        """Patch an item from an update request.

        Every field the caller supplied is set, an explicit null included.
        ``ttl`` present with a number sets a new expiry; present with null
        removes the expiry; absent leaves it untouched. Returns the updated
        record together with the patch that was applied.
        """
        supplied = request.model_fields_set & _UPDATABLE_FIELDS
        set_fields = {
            **request.extra_attributes(),
            **{name: getattr(request, name) for name in supplied},
        }
        remove_fields = list(request.remove)

        if "ttl" in request.model_fields_set:
            if request.ttl is None:
                remove_fields.append(EXPIRES_AT)
            else:
                set_fields[EXPIRES_AT] = self._expires_at(request.ttl)

        patch = Patch(set=set_fields, remove=frozenset(remove_fields))
        record = self.repository.update_item(
            request.user_id, request.sk, patch.set_fields, patch.remove_fields
        )
        return record, patch

    def delete_item(self, request: ItemKeyRequest) -> bool:
        return self.repository.delete_item(request.user_id, request.sk)
