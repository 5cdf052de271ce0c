"""Single owner of the in-memory appointment list."""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from .errors import PlanningError
from .models import Appointment, OptimisticPatch, RescheduleIntent

logger = logging.getLogger(__name__)

Listener = Callable[[tuple[Appointment, ...]], None]


class AppointmentStore:
    """Holds the appointment list shared by every planning view.

    Only the loader (:meth:`replace_all`) and the optimistic path
    (:meth:`apply_optimistic_patch` / :meth:`revert`) write to it. Readers
    get an immutable snapshot and may subscribe to changes.
    """

    def __init__(self, appointments: Iterable[Appointment] = ()):
        self._items: tuple[Appointment, ...] = tuple(appointments)
        self._listeners: list[Listener] = []
        self._issued = 0
        self._applied = 0
        self._detached = False

    @property
    def appointments(self) -> tuple[Appointment, ...]:
        return self._items

    @property
    def detached(self) -> bool:
        return self._detached

    def get(self, appointment_id: str) -> Appointment | None:
        return next((a for a in self._items if a.id == appointment_id), None)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def detach(self) -> None:
        """Stop accepting writes; pending continuations become no-ops."""
        self._detached = True
        self._listeners.clear()

    def next_generation(self) -> int:
        """Ticket for a reload about to be issued."""
        self._issued += 1
        return self._issued

    def replace_all(self, appointments: Iterable[Appointment], generation: int | None = None) -> bool:
        """Swap in a fresh list. Results of an older reload never win over a newer one."""
        if self._detached:
            logger.debug("store detached, dropping reload %s", generation)
            return False
        if generation is not None:
            if generation < self._applied:
                logger.debug("stale reload %s (already at %s)", generation, self._applied)
                return False
            self._applied = generation
        self._set(tuple(appointments))
        return True

    def apply_optimistic_patch(self, intent: RescheduleIntent) -> OptimisticPatch:
        if self._detached:
            raise PlanningError("store is detached")
        current = self.get(intent.appointment_id)
        if current is None:
            raise PlanningError(f"unknown appointment {intent.appointment_id}")
        patch = OptimisticPatch(
            appointment_id=current.id,
            previous_date=current.scheduled_date,
            previous_time_slot=current.time_slot,
            new_date=intent.new_date,
            new_time_slot=intent.new_time_slot,
        )
        self._update(current.id, intent.new_date, intent.new_time_slot)
        return patch

    def revert(self, patch: OptimisticPatch) -> None:
        """Put back the values captured in ``patch``."""
        if self._detached:
            return
        self._update(patch.appointment_id, patch.previous_date, patch.previous_time_slot)

    def _update(self, appointment_id, scheduled_date, time_slot) -> None:
        self._set(tuple(
            a.model_copy(update={"scheduled_date": scheduled_date, "time_slot": time_slot})
            if a.id == appointment_id else a
            for a in self._items
        ))

    def _set(self, items: tuple[Appointment, ...]) -> None:
        self._items = items
        for listener in list(self._listeners):
            listener(items)
