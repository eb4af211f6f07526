"""
Calendar Day - Server-local calendar day helpers.

The credit ledger and the usage signal window both count days by the
server's local date. Conversions go through ``astimezone()`` with no
argument so the zone rules (including DST transitions) of the instant
being converted apply, not the offset in effect right now.
"""

from datetime import date, datetime, time


def local_now() -> datetime:
    """Get current timestamp in the server's local timezone."""
    return datetime.now().astimezone()


def local_date(moment: datetime) -> date:
    """Local calendar date of an aware timestamp."""
    return moment.astimezone().date()


def is_new_calendar_day(last_reset: datetime | None, now: datetime) -> bool:
    """Check whether now falls on a different local calendar day than last_reset."""
    if last_reset is None:
        return True
    return local_date(last_reset) != local_date(now)


def start_of_local_day(moment: datetime) -> datetime:
    """Local midnight of the day containing moment."""
    return datetime.combine(local_date(moment), time.min).astimezone()
