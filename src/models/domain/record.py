"""Record domain model."""

from datetime import datetime
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field, StrictBool, StrictFloat, StrictInt, StrictStr

from ...utils.timestamps import format_timestamp

AttributeValue = Union[StrictBool, StrictInt, StrictFloat, StrictStr, None]

PARTITION_KEY = "partitionKey"
SORT_KEY = "sortKey"
CREATED_AT = "createdAt"
UPDATED_AT = "updatedAt"
EXPIRES_AT = "expiresAt"

MANAGED_ATTRIBUTES = frozenset({PARTITION_KEY, SORT_KEY, CREATED_AT, UPDATED_AT})


class Record(BaseModel):
    """A single item in the table.

    Attributes:
        partition_key: Primary grouping key
        sort_key: Key ordering records within a partition, prefixed by entity kind
        attributes: Open map of caller-defined scalar attributes
        created_at: Creation timestamp, never changed after the first put
        updated_at: Timestamp of the last replacing put or patch
        expires_at: Optional Unix-seconds expiry; the record is logically
            deleted once this moment has passed
    """

    partition_key: str = Field(..., description="Partition key")
    sort_key: str = Field(..., description="Sort key")
    attributes: Dict[str, AttributeValue] = Field(
        default_factory=dict, description="Caller-defined attributes"
    )
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")
    expires_at: Optional[StrictInt] = Field(None, description="TTL timestamp")

    def is_expired(self, now: datetime) -> bool:
        """Check whether the record's TTL has elapsed at the given moment."""
        return self.expires_at is not None and self.expires_at <= now.timestamp()

    def to_item(self) -> Dict[str, Any]:
        """Flatten the record into its attribute-map form.

        Returns:
            Dictionary with the reserved attributes alongside the open ones
        """
        item: Dict[str, Any] = {
            PARTITION_KEY: self.partition_key,
            SORT_KEY: self.sort_key,
            **self.attributes,
            CREATED_AT: format_timestamp(self.created_at),
        }
        if self.updated_at is not None:
            item[UPDATED_AT] = format_timestamp(self.updated_at)
        if self.expires_at is not None:
            item[EXPIRES_AT] = self.expires_at
        return item
