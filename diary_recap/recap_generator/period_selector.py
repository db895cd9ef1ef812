"""
Period selection for recaps.

Weeks follow ISO-8601 (Monday start, week 1 contains the year's first
Thursday), so late-December days can belong to week 1 of the next ISO year and
early-January days to week 52/53 of the previous one. Months are calendar
months. All comparisons use local calendar days and are inclusive on both ends.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, List, Tuple, Union

from .models.recap_models import DailyClip, MonthPeriod, RecapKind, WeekPeriod, to_local_naive

Period = Union[WeekPeriod, MonthPeriod]
DateLike = Union[date, datetime]


def local_day(moment: DateLike) -> date:
    """Local calendar day of a date or datetime."""
    if isinstance(moment, datetime):
        return to_local_naive(moment).date()
    return moment


def week_of(moment: DateLike) -> WeekPeriod:
    iso_year, iso_week, _ = local_day(moment).isocalendar()
    return WeekPeriod(iso_year=iso_year, iso_week=iso_week)


def month_of(moment: DateLike) -> MonthPeriod:
    day = local_day(moment)
    return MonthPeriod(year=day.year, month=day.month)


def period_containing(kind: Union[RecapKind, str], moment: DateLike) -> Period:
    """Period of the given kind that contains the local day of `moment`."""
    if RecapKind(kind) == RecapKind.WEEKLY:
        return week_of(moment)
    return month_of(moment)


def current_period(kind: Union[RecapKind, str], now: DateLike) -> Period:
    """The week or month that `now` falls in."""
    return period_containing(kind, now)


def previous_period(period: Period) -> Period:
    """The immediately preceding week or month, across year boundaries."""
    if isinstance(period, WeekPeriod):
        return week_of(period.start_date - timedelta(days=7))
    if period.month == 1:
        return MonthPeriod(year=period.year - 1, month=12)
    return MonthPeriod(year=period.year, month=period.month - 1)


def period_date_range(period: Period) -> Tuple[date, date]:
    """Inclusive (first day, last day) of a period."""
    return period.start_date, period.end_date


def shift_month(moment: DateLike, offset: int) -> date:
    """First day of the month `offset` months away from the month of `moment`."""
    day = local_day(moment)
    index = day.year * 12 + (day.month - 1) + offset
    return date(index // 12, index % 12 + 1, 1)


def clips_in_period(period: Period, all_clips: Iterable[DailyClip]) -> List[DailyClip]:
    """
    Clips captured inside a period, oldest first.

    Both period endpoints are included. Ties on capture time are ordered by
    filename so the result does not depend on input order.

    Args:
        period: Week or month to select
        all_clips: Clips in any order

    Returns:
        Clips in ascending chronological order, ready for concatenation
    """
    start, end = period_date_range(period)
    selected = [clip for clip in all_clips if start <= local_day(clip.captured_at) <= end]
    return sorted(selected, key=lambda clip: (to_local_naive(clip.captured_at), clip.path.name))
