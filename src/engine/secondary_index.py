"""Secondary index over (sort key, partition key)."""

from typing import Iterator, Set, Tuple

from sortedcontainers import SortedSet

from .keys import prefix_successor


class SecondaryIndex:
    """Ordered set of ``(sort_key, partition_key)`` pairs.

    The index holds no record data, only key tuples pointing back into the
    record store. It is not synchronized on its own: the record store calls
    ``rebuild_entry``/``remove_entry`` from inside its writer section.

    Invariants:
        - Exactly one entry per live record in the owning store
        - Entries are kept in ``(sort_key, partition_key)`` order
    """

    def __init__(self) -> None:
        self._entries: SortedSet = SortedSet()

    def rebuild_entry(self, partition_key: str, sort_key: str) -> None:
        """Insert the entry for a record; re-inserting is a no-op."""
        self._entries.add((sort_key, partition_key))

    def remove_entry(self, partition_key: str, sort_key: str) -> None:
        """Drop the entry for a record if present."""
        self._entries.discard((sort_key, partition_key))

    def query(self, sort_key_prefix: str = "") -> Iterator[Tuple[str, str]]:
        """
        Lazily yield ``(partition_key, sort_key)`` pairs whose sort key has the prefix.

        The scan is bounded by ``[prefix, successor(prefix))``, ordered by
        ``(sort_key, partition_key)``. Each call starts a fresh iteration.

        Args:
            sort_key_prefix: Prefix to match; empty matches every entry

        Returns:
            Iterator over matching key pairs
        """
        successor = prefix_successor(sort_key_prefix)
        if successor is None:
            entries = self._entries.irange(minimum=(sort_key_prefix, ""))
        else:
            entries = self._entries.irange(
                minimum=(sort_key_prefix, ""),
                maximum=(successor, ""),
                inclusive=(True, False),
            )
        for sort_key, partition_key in entries:
            yield partition_key, sort_key

    def keys(self) -> Set[Tuple[str, str]]:
        """Snapshot of every ``(sort_key, partition_key)`` entry."""
        return set(self._entries)

    def __contains__(self, entry: object) -> bool:
        return entry in self._entries

    def __len__(self) -> int:
        return len(self._entries)
