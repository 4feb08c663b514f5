"""Date Keys - Local calendar bucketing for daily logs.

A date key is the YYYY-MM-DD of the local wall-clock, never of UTC. An aware
instant is shifted by its local UTC offset before truncation, so a meal at
00:30 local time lands on the local day even when UTC is still yesterday.
"""

from datetime import date, datetime, timedelta, timezone, tzinfo


def local_date(moment: datetime, tz: tzinfo | None = None) -> date:
    """Local calendar date of an instant.

    Args:
        moment: The instant. Naive values are taken as local wall-clock already.
        tz: Local zone. None means the host zone.

    Returns:
        The calendar date in the local zone
    """
    if moment.tzinfo is None:
        return moment.date()
    utc = moment.astimezone(timezone.utc).replace(tzinfo=None)
    offset = moment.astimezone(tz).utcoffset() or timedelta(0)
    return (utc + offset).date()


def local_date_key(moment: datetime, tz: tzinfo | None = None) -> str:
    """Canonical YYYY-MM-DD key of an instant in the local zone."""
    return local_date(moment, tz).isoformat()


def parse_date_key(date_key: str) -> date:
    """Parse a date key back into a date.

    Raises:
        ValueError: If date_key is not a valid YYYY-MM-DD date
    """
    return date.fromisoformat(date_key)


def trailing_date_keys(today: date, days: int) -> list[str]:
    """Keys for the consecutive days ending at today, oldest first."""
    return [(today - timedelta(days=offset)).isoformat() for offset in range(days - 1, -1, -1)]
