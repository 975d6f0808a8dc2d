from datetime import datetime, timedelta, timezone


def utcnow():
    return datetime.now(timezone.utc)


def from_timestamp(value):
    """Convert a vendor epoch-seconds value to an aware datetime, passing None through."""
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def add_months(dt, months):
    """
    Add calendar months, rolling day overflow into the following month.

    Jan 31 + 1 month lands on Mar 3 (Mar 2 in leap years) instead of being
    clamped to the end of February.
    """
    years, month_index = divmod(dt.month - 1 + months, 12)
    first_of_month = dt.replace(year=dt.year + years, month=month_index + 1, day=1)
    return first_of_month + timedelta(days=dt.day - 1)
