"""In-memory demandes store backing the service."""
from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta
from pathlib import Path

from .grid import calendar_day
from .models import Appointment, Patient, Status, UpdateResult, Urgency

logger = logging.getLogger(__name__)


def _sort_key(appointment: Appointment):
    # date ascending with undated last, then most recently created first
    created = appointment.created_at.timestamp() if appointment.created_at else 0.0
    if appointment.scheduled_date is None:
        return (1, 0.0, -created)
    return (0, appointment.scheduled_date.timestamp(), -created)


class DemandeRepository:
    def __init__(self, appointments=()):
        self._items: dict[str, Appointment] = {a.id: a for a in appointments}

    @classmethod
    def from_json(cls, path: Path) -> "DemandeRepository":
        data = json.loads(Path(path).read_text())
        return cls(Appointment.model_validate(item) for item in data)

    def get(self, appointment_id: str) -> Appointment | None:
        return self._items.get(appointment_id)

    def find(
        self,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        status: Status | None = None,
        urgency: Urgency | None = None,
        include_undated: bool = False,
    ) -> list[Appointment]:
        def in_window(a: Appointment) -> bool:
            if date_from is None and date_to is None:
                return True
            if a.scheduled_date is None:
                return include_undated
            day = calendar_day(a.scheduled_date)
            if date_from is not None and day < calendar_day(date_from):
                return False
            if date_to is not None and day > calendar_day(date_to):
                return False
            return True

        found = [
            a for a in self._items.values()
            if in_window(a)
            and (status is None or a.status == status)
            and (urgency is None or a.urgency == urgency)
        ]
        return sorted(found, key=_sort_key)

    def update_schedule(self, appointment_id: str, new_date: datetime, new_time_slot: str) -> UpdateResult:
        current = self._items.get(appointment_id)
        if current is None:
            return UpdateResult(success=False, error=f"Demande avec l'ID {appointment_id} introuvable")
        updated = current.model_copy(update={"scheduled_date": new_date, "time_slot": new_time_slot})
        self._items[appointment_id] = updated
        logger.info("demande %s moved to %s %s", appointment_id, new_date.date(), new_time_slot)
        return UpdateResult(
            success=True,
            data={
                "id": updated.id,
                "dateRdv": new_date.isoformat(),
                "heureRdv": updated.time_slot,
                "patientId": updated.patient.id if updated.patient else updated.patient_id,
            },
        )


def demo_repository(today: datetime | None = None) -> DemandeRepository:
    """A handful of demandes around ``today`` for OFFLINE_MODE."""
    base = (today or datetime.now()).replace(hour=0, minute=0, second=0, microsecond=0)
    patients = [
        Patient(id="p-1", nom="Martin", prenom="Claire"),
        Patient(id="p-2", nom="Bernard", prenom="Louis"),
        Patient(id="p-3", nom="Petit", prenom="Amina"),
    ]
    return DemandeRepository([
        Appointment(id="demo-1", scheduled_date=base, time_slot="9h00", status=Status.CONFIRMED,
                    patient=patients[0], patient_id="p-1", care_type="Pansement"),
        Appointment(id="demo-2", scheduled_date=base + timedelta(days=1), time_slot="14:30",
                    status=Status.PENDING, urgency=Urgency.HIGH, patient=patients[1], patient_id="p-2",
                    care_type="Prise de sang"),
        Appointment(id="demo-3", scheduled_date=base + timedelta(days=2), time_slot="Toute la journée",
                    status=Status.IN_PROGRESS, patient=patients[2], patient_id="p-3", care_type="Injection"),
        Appointment(id="demo-4", time_slot="À définir avec le professionnel", urgency=Urgency.CRITICAL,
                    patient=patients[0], patient_id="p-1", care_type="Perfusion"),
    ])
