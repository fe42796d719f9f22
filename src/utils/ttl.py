"""TTL helpers for the expiresAt attribute."""

from datetime import datetime, timezone
from typing import Optional

from .timestamps import utc_now


def calculate_ttl(seconds_from_now: int, now: Optional[datetime] = None) -> int:
    """
    Calculate the TTL timestamp for a number of seconds in the future.

    Args:
        seconds_from_now (int): Number of seconds from now when the item should expire.
        now (Optional[datetime]): Reference time, defaults to the current UTC time.

    Returns:
        int: Unix timestamp in seconds.
    """
    moment = now or utc_now()
    return int(moment.timestamp()) + seconds_from_now


def format_ttl_date(ttl_timestamp: Optional[int]) -> str:
    """Format a TTL timestamp into a human-readable UTC date string."""
    if not ttl_timestamp:
        return "No expiration"
    return datetime.fromtimestamp(ttl_timestamp, tz=timezone.utc).isoformat()
