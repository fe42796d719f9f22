"""Domain models for the single-table store."""

from .enums import EntityKind
from .patch import Patch
from .record import (
    CREATED_AT,
    EXPIRES_AT,
    MANAGED_ATTRIBUTES,
    PARTITION_KEY,
    SORT_KEY,
    UPDATED_AT,
    AttributeValue,
    Record,
)

__all__ = [
    "AttributeValue",
    "EntityKind",
    "Patch",
    "Record",
    "CREATED_AT",
    "EXPIRES_AT",
    "MANAGED_ATTRIBUTES",
    "PARTITION_KEY",
    "SORT_KEY",
    "UPDATED_AT",
]
