"""Visible date range for the week and month planning views."""
from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta

from .models import DateRange, Granularity

MONTHS_FR = (
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
)

_DAY_END = time(23, 59, 59, 999000)


def _as_date(value: datetime | date) -> date:
    return value.date() if isinstance(value, datetime) else value


def week_start(value: datetime | date) -> date:
    """Monday of the ISO week holding ``value``."""
    day = _as_date(value)
    return day - timedelta(days=day.weekday())


def add_months(value: date, months: int) -> date:
    """Calendar-month step, clamping the day to the target month's length."""
    index = value.month - 1 + months
    year, month = value.year + index // 12, index % 12 + 1
    return value.replace(year=year, month=month, day=min(value.day, calendar.monthrange(year, month)[1]))


def _day_month(day: date) -> str:
    return f"{day.day} {MONTHS_FR[day.month - 1]}"


def current_range(anchor: datetime | date, granularity: Granularity) -> DateRange:
    """Range shown for ``anchor``: Monday-Sunday for a week, the whole month otherwise."""
    anchor = _as_date(anchor)
    if granularity == Granularity.WEEK:
        first = week_start(anchor)
        last = first + timedelta(days=6)
        title = f"{_day_month(first)} - {_day_month(last)} {last.year}"
    else:
        first = anchor.replace(day=1)
        last = anchor.replace(day=calendar.monthrange(anchor.year, anchor.month)[1])
        title = f"{MONTHS_FR[anchor.month - 1]} {anchor.year}"
    return DateRange(
        start=datetime.combine(first, time.min),
        end=datetime.combine(last, _DAY_END),
        title=title,
    )


def shift(anchor: date, granularity: Granularity, steps: int) -> date:
    if granularity == Granularity.WEEK:
        return anchor + timedelta(days=7 * steps)
    return add_months(anchor, steps)


def days_in_view(date_range: DateRange, granularity: Granularity) -> list[date]:
    """Day columns to draw.

    The month view is padded to whole weeks, from the Monday on or before
    the 1st to the Sunday on or after the last day.
    """
    if granularity == Granularity.WEEK:
        return date_range.days()
    first = week_start(date_range.start)
    last = date_range.end.date()
    last += timedelta(days=6 - last.weekday())
    return [first + timedelta(days=i) for i in range((last - first).days + 1)]


class ViewNavigator:
    """Anchor date plus granularity, with prev/next/today navigation."""

    def __init__(self, anchor: date | None = None, granularity: Granularity = Granularity.WEEK, today=date.today):
        self._today = today
        self.anchor = _as_date(anchor) if anchor is not None else today()
        self.granularity = granularity

    @property
    def range(self) -> DateRange:
        return current_range(self.anchor, self.granularity)

    @property
    def days(self) -> list[date]:
        return days_in_view(self.range, self.granularity)

    def next(self) -> DateRange:
        self.anchor = shift(self.anchor, self.granularity, 1)
        return self.range

    def previous(self) -> DateRange:
        self.anchor = shift(self.anchor, self.granularity, -1)
        return self.range

    def go_to_today(self) -> DateRange:
        self.anchor = self._today()
        return self.range

    def set_granularity(self, granularity: Granularity) -> DateRange:
        self.granularity = granularity
        return self.range
