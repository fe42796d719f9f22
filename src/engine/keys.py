"""
Key codec for composite (partition key, sort key) identities.

A storage key is ``<partition key>\\x00<sort key>``. NUL sorts below every
other character and is rejected inside components, so ordering encoded keys
lexicographically is the same as ordering the (partition, sort) tuples.
"""

from datetime import datetime
from typing import Optional, Tuple

from ..middleware.exceptions import CorruptKeyError, InvalidKeyError
from ..utils.timestamps import format_timestamp

KEY_DELIMITER = "\x00"
SORT_KEY_SEPARATOR = "#"
_MAX_CHAR = chr(0x10FFFF)


def _check_component(name: str, value: str) -> None:
    if not isinstance(value, str) or not value:
        raise InvalidKeyError(f"{name} must be a non-empty string", details={name: value})
    if KEY_DELIMITER in value:
        raise InvalidKeyError(f"{name} must not contain NUL", details={name: value})


def encode(partition_key: str, sort_key: str) -> str:
    """
    Encode a (partition key, sort key) pair into a storage key.

    Args:
        partition_key (str): The partition key.
        sort_key (str): The sort key.

    Returns:
        str: The storage key.

    Raises:
        InvalidKeyError: If either component is empty or contains NUL.
    """
    _check_component("partition_key", partition_key)
    _check_component("sort_key", sort_key)
    return f"{partition_key}{KEY_DELIMITER}{sort_key}"


def decode(key: str) -> Tuple[str, str]:
    """
    Decode a storage key back into its (partition key, sort key) pair.

    Raises:
        CorruptKeyError: If the key was not produced by ``encode``.
    """
    parts = key.split(KEY_DELIMITER) if isinstance(key, str) else []
    if len(parts) != 2 or not all(parts):
        raise CorruptKeyError(key=repr(key))
    return parts[0], parts[1]


def prefix_successor(prefix: str) -> Optional[str]:
    """
    Return the smallest string greater than every string starting with ``prefix``.

    Returns None when no such bound exists (empty prefix or a prefix made only
    of the maximal code point), meaning the range is unbounded above.
    """
    trimmed = prefix.rstrip(_MAX_CHAR)
    if not trimmed:
        return None
    return trimmed[:-1] + chr(ord(trimmed[-1]) + 1)


def partition_range(partition_key: str, sort_key_prefix: str = "") -> Tuple[str, str]:
    """
    Compute the half-open storage-key range covering one partition.

    Args:
        partition_key (str): The partition to scan.
        sort_key_prefix (str): Optional sort key prefix to narrow the range.

    Returns:
        Tuple[str, str]: ``(lower, upper)`` with ``lower`` inclusive and ``upper`` exclusive.
    """
    _check_component("partition_key", partition_key)
    if KEY_DELIMITER in sort_key_prefix:
        raise InvalidKeyError("sort_key_prefix must not contain NUL")
    base = f"{partition_key}{KEY_DELIMITER}"
    successor = prefix_successor(sort_key_prefix)
    if successor is None:
        # everything in the partition sorts below the next delimiter value
        return base + sort_key_prefix, partition_key + chr(ord(KEY_DELIMITER) + 1)
    return base + sort_key_prefix, base + successor


def sort_key_for(
    kind: str, subtype: Optional[str] = None, timestamp: Optional[datetime] = None
) -> str:
    """
    Build a sort key from an entity kind, optional subtype and timestamp.

    Produces ``KIND#<ts>`` or ``KIND#SUBTYPE#<ts>``. Sort keys of the same kind
    order chronologically.

    Args:
        kind (str): Entity kind token, e.g. ``PROFILE``.
        subtype (Optional[str]): Subtype such as ``address`` for details.
        timestamp (Optional[datetime]): Creation time; omitted means no suffix.

    Returns:
        str: The sort key.

    Raises:
        InvalidKeyError: If ``kind`` or ``subtype`` is empty or contains ``#``.
    """
    kind = getattr(kind, "value", kind)
    tokens = [kind] if subtype is None else [kind, subtype]
    for token in tokens:
        if not isinstance(token, str) or not token:
            raise InvalidKeyError("Sort key tokens must be non-empty strings")
        if SORT_KEY_SEPARATOR in token or KEY_DELIMITER in token:
            raise InvalidKeyError(
                f"Sort key tokens must not contain '{SORT_KEY_SEPARATOR}'",
                details={"token": token},
            )
    if timestamp is not None:
        tokens.append(format_timestamp(timestamp))
    return SORT_KEY_SEPARATOR.join(tokens)
