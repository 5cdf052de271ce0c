"""Drag-and-drop rescheduling on the planning grid.

The controller is a two-state machine (``IDLE`` / ``DRAGGING``) fed with
pointer events by the view. A press only turns into a drag once its
activation constraint is met, so plain clicks and touch scrolls never
start a session.
"""
from __future__ import annotations

import logging
import math
import time as _time
from collections.abc import Callable, Sequence
from datetime import datetime, time
from enum import Enum

from pydantic import BaseModel

from . import config
from .grid import calendar_day, locate
from .models import ALL_DAY_LABEL, Appointment, CanonicalSlot, GridCell, RescheduleIntent
from .slots import canonicalize

logger = logging.getLogger(__name__)


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


class PointerKind(str, Enum):
    MOUSE = "mouse"
    TOUCH = "touch"


class ActivationConstraint(BaseModel):
    distance: float | None = None  # pixels moved before the drag starts
    delay_ms: int | None = None  # hold time before the drag starts
    tolerance: float = 0  # movement allowed during the hold

    def reached(self, moved: float, held_ms: float) -> bool:
        if self.delay_ms is not None:
            return held_ms >= self.delay_ms
        if self.distance is not None:
            return moved >= self.distance
        return True

    def aborted(self, moved: float, held_ms: float) -> bool:
        """A hold that moves too early is a scroll, not a drag."""
        return self.delay_ms is not None and held_ms < self.delay_ms and moved > self.tolerance


DEFAULT_ACTIVATION = {
    PointerKind.MOUSE: ActivationConstraint(distance=config.DRAG_DISTANCE),
    PointerKind.TOUCH: ActivationConstraint(delay_ms=config.TOUCH_DELAY_MS, tolerance=config.TOUCH_TOLERANCE),
}


class DragSession(BaseModel):
    appointment: Appointment  # snapshot taken at pick-up
    source_cell: GridCell | None
    pointer: PointerKind
    origin: tuple[float, float]
    position: tuple[float, float]
    over: GridCell | None = None

    @property
    def appointment_id(self) -> str:
        return self.appointment.id


class _Press(BaseModel):
    appointment: Appointment
    pointer: PointerKind
    origin: tuple[float, float]
    pressed_at: float


def resolve_drop(
    appointment: Appointment,
    target: GridCell,
    slots: Sequence[CanonicalSlot] | None = None,
) -> RescheduleIntent | None:
    """Intent for dropping ``appointment`` on ``target``, or None for a no-op.

    On day-level cells (month view) only the date moves and the existing
    time text is kept; ``"Toute la journée"`` is used when none was set.
    """
    new_date = datetime.combine(target.day, time.min)
    if target.slot is None:
        if appointment.scheduled_date is not None and calendar_day(appointment.scheduled_date) == target.day:
            return None
        new_time_slot = appointment.time_slot or ALL_DAY_LABEL
    else:
        if locate(appointment, slots if slots is not None else [target.slot]) == target:
            return None
        new_time_slot = canonicalize(target.slot)
    return RescheduleIntent(appointment_id=appointment.id, new_date=new_date, new_time_slot=new_time_slot)


class DragRescheduleController:
    """Owns the pick-up / hover / drop lifecycle for one planning view.

    ``slots`` lists the rows of an hourly grid; leave it None for a
    day-level grid such as the month view. Accepted drops are handed to
    ``on_reschedule``.
    """

    def __init__(
        self,
        on_reschedule: Callable[[RescheduleIntent], object],
        slots: Sequence[CanonicalSlot] | None = None,
        activation: dict[PointerKind, ActivationConstraint] | None = None,
        clock: Callable[[], float] = _time.monotonic,
    ):
        self.on_reschedule = on_reschedule
        self.slots = list(slots) if slots is not None else None
        self.activation = {**DEFAULT_ACTIVATION, **(activation or {})}
        self._clock = clock
        self._press: _Press | None = None
        self._session: DragSession | None = None

    @property
    def state(self) -> DragState:
        return DragState.DRAGGING if self._session is not None else DragState.IDLE

    @property
    def session(self) -> DragSession | None:
        return self._session

    @property
    def over(self) -> GridCell | None:
        return self._session.over if self._session else None

    def press(self, appointment: Appointment, x: float, y: float, pointer: PointerKind = PointerKind.MOUSE) -> bool:
        if self._press is not None or self._session is not None:
            logger.debug("press on %s ignored, pointer already engaged", appointment.id)
            return False
        self._press = _Press(
            appointment=appointment.model_copy(),
            pointer=pointer,
            origin=(x, y),
            pressed_at=self._clock(),
        )
        self._try_activate(x, y)
        return True

    def move(self, x: float, y: float) -> DragState:
        if self._session is not None:
            self._session.position = (x, y)
        elif self._press is not None:
            self._try_activate(x, y)
        return self.state

    def tick(self) -> DragState:
        """Re-check a pending touch hold without pointer movement."""
        if self._press is not None:
            self._try_activate(*self._press.origin)
        return self.state

    def enter(self, cell: GridCell) -> None:
        """Pointer entered ``cell``. The last cell entered is the drop target."""
        if self._session is None:
            return
        if not self._accepts(cell):
            logger.debug("cell %s is not a drop target here", cell.cell_id)
            return
        self._session.over = cell

    def leave(self, cell: GridCell) -> None:
        if self._session is not None and self._session.over == cell:
            self._session.over = None

    def release(self) -> RescheduleIntent | None:
        """Drop. Returns the emitted intent, or None for a click, cancel or no-op."""
        self._press = None
        session, self._session = self._session, None
        if session is None:
            return None
        if session.over is None:
            logger.debug("drop of %s outside any cell", session.appointment_id)
            return None
        intent = resolve_drop(session.appointment, session.over, self.slots)
        if intent is None:
            logger.debug("drop of %s on its own cell", session.appointment_id)
            return None
        self.on_reschedule(intent)
        return intent

    def cancel(self) -> None:
        self._press = None
        self._session = None

    def _accepts(self, cell: GridCell) -> bool:
        if self.slots is None:
            return cell.slot is None
        return cell.slot is not None and cell.slot in self.slots

    def _try_activate(self, x: float, y: float) -> None:
        press = self._press
        ox, oy = press.origin
        moved = math.hypot(x - ox, y - oy)
        held_ms = (self._clock() - press.pressed_at) * 1000
        constraint = self.activation[press.pointer]
        if constraint.aborted(moved, held_ms):
            logger.debug("hold on %s turned into a scroll", press.appointment.id)
            self._press = None
            return
        if not constraint.reached(moved, held_ms):
            return
        self._session = DragSession(
            appointment=press.appointment,
            source_cell=locate(press.appointment, self.slots),
            pointer=press.pointer,
            origin=press.origin,
            position=(x, y),
        )
        self._press = None
