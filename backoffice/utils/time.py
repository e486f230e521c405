"""Time Utilities for UTC management"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Timezone-aware current moment, used for business-rule comparisons."""
    return datetime.now(timezone.utc)


def get_utc_now() -> datetime:
    """
    Naive UTC datetime for the created_at/updated_at columns
    (TIMESTAMP WITHOUT TIME ZONE).
    """
    return utc_now().replace(tzinfo=None)


def as_utc(moment: datetime) -> datetime:
    """Read a naive datetime as UTC; aware values are returned unchanged."""
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)
