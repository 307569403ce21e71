"""Timestamp helpers."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso_z(moment: datetime, timespec: str = "milliseconds") -> str:
    """
    Render ``moment`` as ISO-8601 UTC with a ``Z`` suffix.

    Naive datetimes are taken to be UTC already.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec=timespec).replace("+00:00", "Z")


__all__ = ["to_iso_z", "utc_now"]
