"""Domain enums for the single-table store."""

from enum import Enum
from typing import Optional


class EntityKind(str, Enum):
    """Entity kind encoded as the leading token of a sort key.

    Inherits from str to ensure JSON serialization works correctly.
    """

    PROFILE = "PROFILE"
    DETAIL = "DETAIL"
    ACTIVITY = "ACTIVITY"

    @property
    def subtype_attribute(self) -> Optional[str]:
        """Name of the attribute holding the subtype for this kind, if any."""
        attributes = {
            EntityKind.DETAIL: "detailType",
            EntityKind.ACTIVITY: "activityType",
        }
        return attributes.get(self)
