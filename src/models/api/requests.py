"""Request models for API endpoints."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AttributeRequest(CamelModel):
    """Request that may carry arbitrary extra scalar attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    def extra_attributes(self) -> Dict[str, Any]:
        """Fields supplied by the caller that the model does not declare."""
        return dict(self.model_extra or {})


class CreateProfileRequest(AttributeRequest):
    """Payload for the ``createProfile`` operation."""

    name: str = Field(..., min_length=1, description="Display name")
    user_id: Optional[str] = Field(
        None, min_length=1, description="Partition key; generated when omitted"
    )
    sk: Optional[str] = Field(
        None, min_length=1, description="Explicit sort key; PROFILE#<ts> when omitted"
    )
    email: Optional[str] = None
    age: Optional[int] = None
    ttl: Optional[int] = Field(None, description="Seconds until the item expires")


class AddDetailRequest(AttributeRequest):
    """Payload for the ``addDetail`` operation."""

    user_id: str = Field(..., min_length=1)
    detail_type: str = Field(..., min_length=1, description="Detail subtype, e.g. address")
    description: Optional[str] = None
    ttl: Optional[int] = Field(None, description="Seconds until the item expires")


class AddActivityRequest(AttributeRequest):
    """Payload for the ``addActivity`` operation."""

    user_id: str = Field(..., min_length=1)
    activity_type: str = Field(..., min_length=1, description="Activity subtype, e.g. login")
    description: Optional[str] = None
    ttl: Optional[int] = Field(None, description="Seconds until the item expires")


class ItemKeyRequest(CamelModel):
    """Payload addressing exactly one item (``get`` and ``delete``)."""

    user_id: str = Field(..., min_length=1)
    sk: str = Field(..., min_length=1)


class QueryUserRequest(CamelModel):
    """Payload for the ``queryUser`` operation."""

    user_id: str = Field(..., min_length=1)
    sk_prefix: Optional[str] = None


class QueryBySortRequest(CamelModel):
    """Payload for the ``queryBySort`` operation."""

    sk_prefix: str = Field(..., min_length=1)


class UpdateItemRequest(AttributeRequest):
    """Payload for the ``update`` operation.

    Declared and extra fields become ``set`` entries. ``ttl`` sets a new
    expiry in seconds from now, or removes it when explicitly null.
    """

    user_id: str = Field(..., min_length=1)
    sk: str = Field(..., min_length=1)
    name: Optional[str] = None
    email: Optional[str] = None
    age: Optional[int] = None
    description: Optional[str] = None
    ttl: Optional[int] = None
    remove: List[str] = Field(default_factory=list, description="Fields to remove")


class ListItemsQuery(CamelModel):
    """Query string parameters for GET /users."""

    user_id: Optional[str] = Field(None, min_length=1)
    sk_prefix: Optional[str] = None
    query_type: Optional[Literal["bySort"]] = None


# operation name -> payload model for POST /users
OPERATION_MODELS = {
    "createProfile": CreateProfileRequest,
    "addDetail": AddDetailRequest,
    "addActivity": AddActivityRequest,
    "get": ItemKeyRequest,
    "queryUser": QueryUserRequest,
    "queryBySort": QueryBySortRequest,
    "update": UpdateItemRequest,
    "delete": ItemKeyRequest,
}
