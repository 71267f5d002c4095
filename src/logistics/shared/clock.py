"""Timezone helpers."""

from datetime import UTC, datetime


def as_utc(moment: datetime | None) -> datetime | None:
    """Treat naive datetimes read back from storage as UTC."""
    if moment is None:
        return None
    return moment.replace(tzinfo=UTC) if moment.tzinfo is None else moment.astimezone(UTC)
