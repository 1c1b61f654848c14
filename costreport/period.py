import datetime as dt
from typing import Union

from .schemas import DateRange


def compute_range(now: Union[dt.datetime, dt.date]) -> DateRange:
    """
    Closed reporting period for `now`.
    On the 1st this is the whole previous month, otherwise the 1st of the
    current month through yesterday.
    """
    today = now.date() if isinstance(now, dt.datetime) else now
    first_of_month = today.replace(day=1)
    if today.day == 1:
        last_of_previous = first_of_month - dt.timedelta(days=1)
        return DateRange(start=last_of_previous.replace(day=1), end=last_of_previous)
    return DateRange(start=first_of_month, end=today - dt.timedelta(days=1))
