"""Pydantic models for API responses."""

from typing import Any, Dict, List, Optional

from ...utils.ttl import format_ttl_date
from ..domain import Record
from .requests import CamelModel


class VersionResponse(CamelModel):
    """Response containing the API version.

    Attributes:
        version: The version string
    """

    version: str


class ExpirationInfo(CamelModel):
    """TTL of an item in raw and human-readable form."""

    timestamp: int
    formatted_date: str

    @classmethod
    def from_timestamp(cls, timestamp: Optional[int]) -> Optional["ExpirationInfo"]:
        if timestamp is None:
            return None
        return cls(timestamp=timestamp, formatted_date=format_ttl_date(timestamp))


class ItemResponse(CamelModel):
    """Response carrying a single item."""

    message: Optional[str] = None
    item: Dict[str, Any]
    expires_at: Optional[ExpirationInfo] = None
    operation: str
    explanation: str

    @classmethod
    def from_record(cls, record: Record, **fields: Any) -> "ItemResponse":
        """Create a response for a record plus operation metadata."""
        return cls(
            item=record.to_item(),
            expires_at=ExpirationInfo.from_timestamp(record.expires_at),
            **fields,
        )


class UpdateResponse(ItemResponse):
    """Response for the ``update`` operation, including the applied patch."""

    update: Dict[str, Any]


class ItemListResponse(CamelModel):
    """Response carrying an ordered list of items."""

    items: List[Dict[str, Any]]
    count: int
    operation: str
    explanation: str
    note: Optional[str] = None
    parameters: Optional[Dict[str, str]] = None

    @classmethod
    def from_records(cls, records: List[Record], **fields: Any) -> "ItemListResponse":
        """Create a list response preserving the order of ``records``."""
        return cls(
            items=[record.to_item() for record in records],
            count=len(records),
            **fields,
        )


class DeleteResponse(CamelModel):
    """Response for the ``delete`` operation."""

    message: str
    key: Dict[str, str]
    removed: bool
    operation: str
    explanation: str
