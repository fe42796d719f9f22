"""API models for request/response handling."""

from .requests import (
    OPERATION_MODELS,
    AddActivityRequest,
    AddDetailRequest,
    CreateProfileRequest,
    ItemKeyRequest,
    ListItemsQuery,
    QueryBySortRequest,
    QueryUserRequest,
    UpdateItemRequest,
)
from .responses import (
    DeleteResponse,
    ExpirationInfo,
    ItemListResponse,
    ItemResponse,
    UpdateResponse,
    VersionResponse,
)

__all__ = [
    # Requests
    "OPERATION_MODELS",
    "AddActivityRequest",
    "AddDetailRequest",
    "CreateProfileRequest",
    "ItemKeyRequest",
    "ListItemsQuery",
    "QueryBySortRequest",
    "QueryUserRequest",
    "UpdateItemRequest",
    # Responses
    "DeleteResponse",
    "ExpirationInfo",
    "ItemListResponse",
    "ItemResponse",
    "UpdateResponse",
    "VersionResponse",
]
