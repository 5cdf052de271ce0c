"""Optimistic rescheduling with reconciliation against the server."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

from . import client
from .models import Appointment, OptimisticPatch, RescheduleIntent, UpdateResult
from .store import AppointmentStore

logger = logging.getLogger(__name__)

TRANSPORT_ERROR_MESSAGE = "Erreur lors du déplacement"


class PersistenceGateway(Protocol):
    async def list_appointments(self) -> list[Appointment]: ...

    async def update_schedule(self, intent: RescheduleIntent) -> UpdateResult: ...


def _log_notification(message: str) -> None:
    logger.warning("user notification: %s", message)


class OptimisticUpdateCoordinator:
    """Applies a reschedule locally, persists it, then reloads unconditionally.

    Failures are surfaced through ``notify``. Rollback happens through the
    reload replacing the whole list; if that reload fails too, the patch
    is reverted from its snapshot.
    """

    def __init__(
        self,
        store: AppointmentStore,
        gateway: PersistenceGateway = client,  # the client module satisfies the protocol
        notify: Callable[[str], None] = _log_notification,
    ):
        self.store = store
        self.gateway = gateway
        self.notify = notify
        self._tasks: set[asyncio.Task] = set()

    def apply(self, intent: RescheduleIntent) -> asyncio.Task | None:
        """Patch the store now and persist in the background.

        Returns None, without touching the server, when the view is gone or
        the appointment left the list while it was being dragged. Must be
        called from a running event loop.
        """
        if self.store.detached:
            logger.debug("store detached, dropping reschedule of %s", intent.appointment_id)
            return None
        if self.store.get(intent.appointment_id) is None:
            logger.debug("%s no longer listed, dropping reschedule", intent.appointment_id)
            return None
        patch = self.store.apply_optimistic_patch(intent)
        task = asyncio.get_running_loop().create_task(self._commit(patch))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def reschedule(self, intent: RescheduleIntent) -> OptimisticPatch | None:
        """Same as :meth:`apply`, awaiting the round trip."""
        task = self.apply(intent)
        return await task if task is not None else None

    async def reload(self) -> bool:
        generation = self.store.next_generation()
        appointments = await self.gateway.list_appointments()
        return self.store.replace_all(appointments, generation=generation)

    async def drain(self) -> None:
        """Wait for every in-flight reschedule."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        """Detach from the store; in-flight work finishes without writing."""
        self.store.detach()

    async def _commit(self, patch: OptimisticPatch) -> OptimisticPatch:
        intent = RescheduleIntent(
            appointment_id=patch.appointment_id,
            new_date=patch.new_date,
            new_time_slot=patch.new_time_slot,
        )
        # any failure here (transport, unreadable body) ends in a reload
        try:
            result = await self.gateway.update_schedule(intent)
        except Exception:
            logger.exception("reschedule of %s failed", patch.appointment_id)
            self._report(TRANSPORT_ERROR_MESSAGE)
            await self._reconcile(patch)
            return patch

        if result.success:
            patch.confirmed = True
        else:
            logger.warning("reschedule of %s refused: %s", patch.appointment_id, result.error)
            self._report(f"Erreur: {result.error}")
        await self._reconcile(patch)
        return patch

    def _report(self, message: str) -> None:
        if not self.store.detached:
            self.notify(message)

    async def _reconcile(self, patch: OptimisticPatch) -> None:
        try:
            await self.reload()
        except Exception:
            logger.exception("reload after rescheduling %s failed", patch.appointment_id)
            if not patch.confirmed:
                self.store.revert(patch)
