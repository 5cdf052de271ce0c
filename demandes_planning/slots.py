"""Time-of-day parsing for the free-text ``heureRdv`` field.

Stored slots come in several shapes ("9h", "09h00", "9:00", "14:30") or as
one of the all-day sentinels. Everything past this module works on
:class:`CanonicalSlot` only.
"""
from __future__ import annotations

import re

from . import config
from .models import ALL_DAY, ALL_DAY_LABEL, TO_BE_DEFINED_LABEL, CanonicalSlot

_ALL_DAY_SENTINELS = {ALL_DAY_LABEL.casefold(), TO_BE_DEFINED_LABEL.casefold()}
_HOUR_RE = re.compile(r"(\d+)[h:]")


def resolve(time_slot: str | None) -> CanonicalSlot:
    """Map a stored time slot to its grid bucket. Never raises."""
    if not time_slot or not time_slot.strip():
        return ALL_DAY
    text = time_slot.strip()
    if text.casefold() in _ALL_DAY_SENTINELS:
        return ALL_DAY
    match = _HOUR_RE.search(text)
    if not match:
        return ALL_DAY
    hour = int(match.group(1))
    if hour > 23:
        return ALL_DAY
    return CanonicalSlot.at(hour)


def canonicalize(slot: CanonicalSlot) -> str:
    """Inverse of :func:`resolve`, used when writing a slot back."""
    if slot.is_all_day:
        return ALL_DAY_LABEL
    return f"{slot.hour}h"


class SlotGrid:
    """Rows of a day column: the all-day row followed by hourly rows."""

    def __init__(self, first_hour: int, last_hour: int, include_all_day: bool = True):
        if not 0 <= first_hour <= last_hour <= 23:
            raise ValueError(f"invalid hour bounds {first_hour}-{last_hour}")
        self.first_hour = first_hour
        self.last_hour = last_hour
        self.include_all_day = include_all_day

    @property
    def hours(self) -> range:
        return range(self.first_hour, self.last_hour + 1)

    def slots(self) -> list[CanonicalSlot]:
        rows = [ALL_DAY] if self.include_all_day else []
        rows.extend(CanonicalSlot.at(h) for h in self.hours)
        return rows

    def __contains__(self, slot: CanonicalSlot) -> bool:
        if slot.is_all_day:
            return self.include_all_day
        return self.first_hour <= slot.hour <= self.last_hour

    def __repr__(self) -> str:
        return f"SlotGrid({self.first_hour}-{self.last_hour})"


WEEK_GRID = SlotGrid(*config.WEEK_HOURS)
COMPACT_GRID = SlotGrid(*config.COMPACT_HOURS)
