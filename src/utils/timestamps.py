"""Timestamp helpers shared by the engine and the API layer."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """
    Format a datetime as a fixed-width ISO-8601 UTC string with milliseconds.

    Fixed width keeps lexicographic order equal to chronological order,
    which sort keys rely on.

    Args:
        moment (datetime): The datetime to format. Naive values are treated as UTC.

    Returns:
        str: Timestamp such as ``2024-01-01T00:00:00.000Z``.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"
