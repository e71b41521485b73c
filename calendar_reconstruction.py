#!/usr/bin/env python3
"""
Turn the bare day-of-month numbers of the forecast table back into dates

The table only prints day numbers (28, 29, 30, 1, 2, ...). Month and year come
from the issuance timestamp; a day number that does not increase means the
table crossed into the next month.
"""

import logging
from datetime import date, datetime
from typing import List, Sequence

from forecast_errors import MalformedValueError

logger = logging.getLogger(__name__)


def reconstruct_dates(issued_at: datetime, days: Sequence[int]) -> List[date]:
    """One calendar date per day number, starting in the issuance month"""
    year, month = issued_at.year, issued_at.month

    dates = []
    previous = None
    for day in days:
        if previous is not None and day <= previous:
            month += 1
            if month > 12:
                month = 1
                year += 1
            logger.debug(f"Day {day} after {previous}: rolled over to {year}-{month:02d}")

        try:
            dates.append(date(year, month, day))
        except ValueError as e:
            raise MalformedValueError(f"invalid day {day} for {year}-{month:02d}: {e}")
        previous = day

    return dates


def localize_hour(tz, day: date, hour: int) -> datetime:
    """Wall-clock hour on day in tz (a pytz zone).

    Repeated fall-back hours take the standard-time offset. Hours that do not
    exist because of a spring-forward gap are moved past the gap by
    tz.normalize, e.g. 2 AM becomes 3 AM daylight time.
    """
    return tz.normalize(tz.localize(datetime(day.year, day.month, day.day, hour), is_dst=False))
