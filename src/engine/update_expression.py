"""Build validated, atomic update instructions from sparse patches."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Tuple

from ..middleware.exceptions import (
    ConflictingFieldOpError,
    EmptyPatchError,
    ReservedFieldError,
    StorageValidationError,
)
from ..models.domain import EXPIRES_AT, MANAGED_ATTRIBUTES, Patch, Record


def validate_expires_at(value: Any) -> int:
    """
    Check that an ``expiresAt`` value is a positive Unix-seconds integer.

    Raises:
        StorageValidationError: If the value is not a positive integer.
    """
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise StorageValidationError(
            f"{EXPIRES_AT} must be a positive integer number of seconds",
            details={EXPIRES_AT: value},
        )
    return value


@dataclass(frozen=True)
class UpdateInstruction:
    """A validated patch ready to be applied in one step.

    Removals are applied before sets. ``updated_at`` is always written.
    """

    removes: Tuple[str, ...]
    sets: Tuple[Tuple[str, Any], ...]
    updated_at: datetime

    def apply(self, record: Record) -> Record:
        """Return a new record with this instruction applied."""
        attributes = dict(record.attributes)
        expires_at: Optional[int] = record.expires_at

        for field_name in self.removes:
            if field_name == EXPIRES_AT:
                expires_at = None
            else:
                attributes.pop(field_name, None)

        for field_name, value in self.sets:
            if field_name == EXPIRES_AT:
                expires_at = value
            else:
                attributes[field_name] = value

        return record.model_copy(
            update={
                "attributes": attributes,
                "expires_at": expires_at,
                "updated_at": self.updated_at,
            }
        )

    def describe(self) -> Dict[str, Any]:
        """Structured view of the instruction for responses and logs."""
        return {
            "remove": list(self.removes),
            "set": dict(self.sets),
            "updatedAt": self.updated_at.isoformat(),
        }


def build_update(
    set_fields: Optional[Mapping[str, Any]],
    remove_fields: Optional[Any],
    now: datetime,
) -> UpdateInstruction:
    """
    Translate a sparse patch into a single update instruction.

    Args:
        set_fields: Field to new value mapping
        remove_fields: Field names to remove
        now: Timestamp written to ``updatedAt``

    Returns:
        The validated instruction

    Raises:
        ConflictingFieldOpError: If a field is both set and removed
        ReservedFieldError: If a key or store-managed field is touched
        EmptyPatchError: If neither side names any field
        StorageValidationError: If ``expiresAt`` is set to a non-positive or non-integer value
            or ``remove_fields`` is a bare string
    """
    if isinstance(remove_fields, str):
        raise StorageValidationError(
            "remove_fields must be a collection of field names, not a string",
            details={"remove": remove_fields},
        )

    patch = Patch(set=dict(set_fields or {}), remove=frozenset(remove_fields or ()))

    set_names = frozenset(patch.set_fields)
    conflicts = patch.remove_fields & set_names
    if conflicts:
        raise ConflictingFieldOpError(conflicts)

    reserved = (patch.remove_fields | set_names) & MANAGED_ATTRIBUTES
    if reserved:
        raise ReservedFieldError(reserved)

    if patch.is_empty:
        raise EmptyPatchError()

    if EXPIRES_AT in patch.set_fields:
        validate_expires_at(patch.set_fields[EXPIRES_AT])

    return UpdateInstruction(
        removes=tuple(sorted(patch.remove_fields)),
        sets=tuple(sorted(patch.set_fields.items())),
        updated_at=now,
    )
