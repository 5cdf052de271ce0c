from collections.abc import Iterable
from datetime import date

from pydantic import BaseModel

from .grid import calendar_day, filter_in_range
from .models import Appointment, DateRange, Granularity, Status, Urgency
from .navigation import current_range


class PeriodStats(BaseModel):
    """Legend counters of the planning header."""
    total: int = 0
    confirmed: int = 0
    in_progress: int = 0
    completed: int = 0
    urgent: int = 0


class PlanningCounts(BaseModel):
    today: int = 0
    this_week: int = 0
    this_month: int = 0


def period_stats(appointments: Iterable[Appointment], date_range: DateRange) -> PeriodStats:
    in_range = filter_in_range(appointments, date_range)
    return PeriodStats(
        total=len(in_range),
        confirmed=sum(a.status == Status.CONFIRMED for a in in_range),
        in_progress=sum(a.status == Status.IN_PROGRESS for a in in_range),
        completed=sum(a.status == Status.COMPLETED for a in in_range),
        urgent=sum(a.urgency == Urgency.CRITICAL for a in in_range),
    )


def planning_counts(appointments: Iterable[Appointment], today: date) -> PlanningCounts:
    dated = [a for a in appointments if a.scheduled_date is not None]
    week = current_range(today, Granularity.WEEK)
    month = current_range(today, Granularity.MONTH)
    return PlanningCounts(
        today=sum(calendar_day(a.scheduled_date) == today for a in dated),
        this_week=len(filter_in_range(dated, week)),
        this_month=len(filter_in_range(dated, month)),
    )
