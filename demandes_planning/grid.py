"""Grouping of appointments into planning grid cells."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from zoneinfo import ZoneInfo

from . import config
from .models import ALL_DAY, Appointment, CanonicalSlot, DateRange, GridCell
from .slots import resolve

logger = logging.getLogger(__name__)

_TZ = ZoneInfo(config.TIMEZONE) if config.TIMEZONE else None

CellKey = tuple[date, CanonicalSlot]


def calendar_day(value: datetime | date, tz: ZoneInfo | None = _TZ) -> date:
    """Calendar date of a stored value.

    Naive datetimes are taken as already local. Aware ones are read in
    ``tz`` (the host's local zone when None), the same way the dashboard
    displays them.
    """
    if not isinstance(value, datetime):
        return value
    if value.tzinfo is not None:
        value = value.astimezone(tz)
    return value.date()


def slot_for(appointment: Appointment, slots: Iterable[CanonicalSlot]) -> CanonicalSlot | None:
    """Row an appointment lands on among ``slots``.

    Hours outside the displayed rows fall back to the all-day row so that
    a dated appointment is never hidden by the grid bounds.
    """
    slots = set(slots)
    slot = resolve(appointment.time_slot)
    if slot in slots:
        return slot
    if ALL_DAY in slots:
        return ALL_DAY
    return None


def locate(appointment: Appointment, slots: Iterable[CanonicalSlot] | None = None) -> GridCell | None:
    """Cell currently holding ``appointment``; day-level when ``slots`` is None."""
    if appointment.scheduled_date is None:
        return None
    day = calendar_day(appointment.scheduled_date)
    if slots is None:
        return GridCell(day=day)
    slot = slot_for(appointment, slots)
    if slot is None:
        return None
    return GridCell(day=day, slot=slot)


def filter_in_range(appointments: Iterable[Appointment], date_range: DateRange) -> list[Appointment]:
    return [
        a for a in appointments
        if a.scheduled_date is not None and date_range.contains_day(calendar_day(a.scheduled_date))
    ]


def bucket(
    appointments: Iterable[Appointment],
    days: Sequence[date],
    slots: Sequence[CanonicalSlot],
) -> dict[CellKey, list[Appointment]]:
    """Partition ``appointments`` over the ``days`` x ``slots`` grid.

    Every requested cell is present in the result, empty or not. Within a
    cell the source order is kept. Undated appointments and those outside
    ``days`` are left out.
    """
    cells: dict[CellKey, list[Appointment]] = {(d, s): [] for d in days for s in slots}
    wanted_days = set(days)
    skipped = 0
    for appointment in appointments:
        if appointment.scheduled_date is None:
            continue
        day = calendar_day(appointment.scheduled_date)
        if day not in wanted_days:
            continue
        slot = slot_for(appointment, slots)
        if slot is None:
            skipped += 1
            continue
        cells[(day, slot)].append(appointment)
    if skipped:
        logger.debug("%d appointments outside the displayed rows", skipped)
    return cells


def bucket_by_day(appointments: Iterable[Appointment], days: Sequence[date]) -> dict[date, list[Appointment]]:
    """Day-level grouping used by the month view."""
    by_day: dict[date, list[Appointment]] = {d: [] for d in days}
    for appointment in appointments:
        if appointment.scheduled_date is None:
            continue
        day = calendar_day(appointment.scheduled_date)
        if day in by_day:
            by_day[day].append(appointment)
    return by_day


def preview(items: Sequence[Appointment], limit: int = config.MONTH_PREVIEW) -> tuple[list[Appointment], int]:
    """First ``limit`` items of a month cell and the "+N" overflow count."""
    visible = list(items[:limit])
    return visible, len(items) - len(visible)
