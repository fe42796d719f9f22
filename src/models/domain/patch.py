"""Patch domain model."""

from typing import Dict, FrozenSet

from pydantic import BaseModel, ConfigDict, Field

from .record import AttributeValue


class Patch(BaseModel):
    """A sparse, field-level change to a record.

    Attributes:
        set_fields: Field to new value map, serialized as ``set``
        remove_fields: Field names to drop, serialized as ``remove``
    """

    model_config = ConfigDict(populate_by_name=True)

    set_fields: Dict[str, AttributeValue] = Field(
        default_factory=dict, alias="set", description="Fields to set"
    )
    remove_fields: FrozenSet[str] = Field(
        default_factory=frozenset, alias="remove", description="Fields to remove"
    )

    @property
    def is_empty(self) -> bool:
        """True when the caller supplied no changes at all."""
        return not self.set_fields and not self.remove_fields
