"""In-process record store facade over the table and its secondary index."""

import threading
from datetime import datetime
from typing import Any, Callable, Iterable, List, Mapping, Optional, Set, Tuple

from aws_lambda_powertools.logging import Logger
from sortedcontainers import SortedDict

from ..middleware.exceptions import RecordNotFoundError, ReservedFieldError
from ..models.domain import EXPIRES_AT, MANAGED_ATTRIBUTES, Record
from ..utils.timestamps import utc_now
from .keys import encode, partition_range
from .secondary_index import SecondaryIndex
from .update_expression import build_update, validate_expires_at

logger = Logger()


class RecordStore:
    """Single-table store keyed by (partition key, sort key).

    Records live in an ordered mapping keyed by the encoded storage key, so a
    partition query is one range scan. Every mutation updates the records and
    the secondary index inside one writer section; reads take the same lock
    only long enough to copy out a consistent snapshot.

    Expired records are treated as absent by every read even before the TTL
    reaper physically removes them.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        """Initialize an empty store.

        Args:
            clock: Callable returning the current aware UTC datetime
        """
        self._clock = clock
        self._records: SortedDict = SortedDict()
        self._index = SecondaryIndex()
        self._lock = threading.RLock()

    def now(self) -> datetime:
        """Current time according to the store's clock."""
        return self._clock()

    def put(
        self,
        partition_key: str,
        sort_key: str,
        attributes: Optional[Mapping[str, Any]] = None,
    ) -> Record:
        """Insert a record or fully replace the one at the same key.

        ``createdAt`` is kept from a live record being replaced, otherwise set
        to now. An ``expiresAt`` entry in ``attributes`` becomes the TTL.

        Args:
            partition_key: Partition key
            sort_key: Sort key
            attributes: Caller-defined attributes

        Returns:
            The stored record

        Raises:
            InvalidKeyError: If either key component is invalid
            ReservedFieldError: If ``attributes`` names a store-managed field
            StorageValidationError: If ``expiresAt`` is not a positive integer
        """
        key = encode(partition_key, sort_key)
        attrs = dict(attributes or {})

        reserved = MANAGED_ATTRIBUTES.intersection(attrs)
        if reserved:
            raise ReservedFieldError(reserved)

        expires_at = attrs.pop(EXPIRES_AT, None)
        if expires_at is not None:
            validate_expires_at(expires_at)

        with self._lock:
            now = self._clock()
            existing = self._live(self._records.get(key), now)
            record = Record(
                partition_key=partition_key,
                sort_key=sort_key,
                attributes=attrs,
                created_at=existing.created_at if existing else now,
                updated_at=now if existing else None,
                expires_at=expires_at,
            )
            self._records[key] = record
            self._index.rebuild_entry(partition_key, sort_key)

        logger.debug(
            "Put record",
            extra={
                "partition_key": partition_key,
                "sort_key": sort_key,
                "replaced": existing is not None,
            },
        )
        return record.model_copy(deep=True)

    def get(self, partition_key: str, sort_key: str) -> Optional[Record]:
        """Point lookup; None if the record is absent or expired."""
        key = encode(partition_key, sort_key)
        with self._lock:
            record = self._live(self._records.get(key), self._clock())
            return record.model_copy(deep=True) if record else None

    def query_by_partition(
        self, partition_key: str, sort_key_prefix: Optional[str] = None
    ) -> List[Record]:
        """
        Return live records of one partition, ordered by sort key.

        Args:
            partition_key: Partition to read
            sort_key_prefix: Optional prefix the sort key must start with

        Returns:
            Records in ascending sort-key order
        """
        lower, upper = partition_range(partition_key, sort_key_prefix or "")
        with self._lock:
            keys = self._records.irange(lower, upper, inclusive=(True, False))
            return self._snapshot(self._records[key] for key in keys)

    def query_by_sort_prefix(self, sort_key_prefix: str) -> List[Record]:
        """
        Return live records from every partition whose sort key has the prefix.

        Served by the secondary index; ordered by ``(sort_key, partition_key)``.
        """
        with self._lock:
            pairs = self._index.query(sort_key_prefix)
            return self._snapshot(
                self._records[encode(partition_key, sort_key)]
                for partition_key, sort_key in pairs
            )

    def scan(self) -> List[Record]:
        """
        Return every live record.

        This reads the whole table and is O(n); prefer the query methods.
        Order follows the storage key and is stable between mutations.
        """
        with self._lock:
            logger.debug("Full-table scan", extra={"record_count": len(self._records)})
            return self._snapshot(self._records.values())

    def patch(
        self,
        partition_key: str,
        sort_key: str,
        set_fields: Optional[Mapping[str, Any]] = None,
        remove_fields: Optional[Iterable[str]] = None,
    ) -> Record:
        """
        Apply a field-level patch to a live record in one atomic step.

        Removals are applied first, then sets; ``updatedAt`` is set to now.

        Args:
            partition_key: Partition key
            sort_key: Sort key
            set_fields: Fields to set
            remove_fields: Fields to remove

        Returns:
            The full record after the patch

        Raises:
            RecordNotFoundError: If no live record exists at the key
            ReservedFieldError: If a key or store-managed field is touched
            ConflictingFieldOpError: If a field is both set and removed
            EmptyPatchError: If the patch names no fields
        """
        key = encode(partition_key, sort_key)
        with self._lock:
            now = self._clock()
            instruction = build_update(set_fields, remove_fields, now)
            record = self._live(self._records.get(key), now)
            if record is None:
                raise RecordNotFoundError(partition_key, sort_key)
            updated = instruction.apply(record)
            self._records[key] = updated
            self._index.rebuild_entry(partition_key, sort_key)

        logger.debug(
            "Patched record",
            extra={
                "partition_key": partition_key,
                "sort_key": sort_key,
                "update": instruction.describe(),
            },
        )
        return updated.model_copy(deep=True)

    def delete(self, partition_key: str, sort_key: str) -> bool:
        """
        Remove a record and its index entry.

        Deleting a missing key is a no-op, so repeated deletes are safe.

        Returns:
            True if a record was physically removed
        """
        key = encode(partition_key, sort_key)
        with self._lock:
            removed = self._delete_locked(key, partition_key, sort_key)

        logger.debug(
            "Deleted record",
            extra={"partition_key": partition_key, "sort_key": sort_key, "removed": removed},
        )
        return removed

    def expired_keys(self, now: Optional[datetime] = None) -> List[Tuple[str, str]]:
        """List ``(partition_key, sort_key)`` of records whose TTL has elapsed."""
        with self._lock:
            moment = now or self._clock()
            return [
                (record.partition_key, record.sort_key)
                for record in self._records.values()
                if record.is_expired(moment)
            ]

    def delete_expired(
        self, partition_key: str, sort_key: str, now: Optional[datetime] = None
    ) -> bool:
        """
        Delete a record only if it is still expired.

        The expiry is re-checked inside the writer section, so a record that
        was replaced after being listed by ``expired_keys`` survives.

        Returns:
            True if the record was removed
        """
        key = encode(partition_key, sort_key)
        with self._lock:
            record = self._records.get(key)
            if record is None or not record.is_expired(now or self._clock()):
                return False
            return self._delete_locked(key, partition_key, sort_key)

    def index_keys(self) -> Set[Tuple[str, str]]:
        """Snapshot of the secondary index as ``(sort_key, partition_key)`` pairs."""
        with self._lock:
            return self._index.keys()

    def __len__(self) -> int:
        """Number of physically stored records, expired ones included."""
        with self._lock:
            return len(self._records)

    def _delete_locked(self, key: str, partition_key: str, sort_key: str) -> bool:
        removed = self._records.pop(key, None)
        self._index.remove_entry(partition_key, sort_key)
        return removed is not None

    def _snapshot(self, records: Iterable[Record]) -> List[Record]:
        now = self._clock()
        return [
            record.model_copy(deep=True)
            for record in records
            if not record.is_expired(now)
        ]

    @staticmethod
    def _live(record: Optional[Record], now: datetime) -> Optional[Record]:
        if record is None or record.is_expired(now):
            return None
        return record
