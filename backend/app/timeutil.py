"""UTC helpers shared by services and stores."""
from datetime import datetime

import pytz


def utcnow() -> datetime:
    return datetime.now(pytz.utc)


def to_utc(value: datetime) -> datetime:
    """Normalise ``value`` to an aware UTC datetime.

    SQLite hands back naive values for ``DateTime(timezone=True)`` columns;
    everything this app stores is UTC, so naive values are localized as UTC.
    """
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)
