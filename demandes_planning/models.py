from datetime import date, datetime, timedelta
from enum import Enum

from pydantic import BaseModel, Field

ALL_DAY_LABEL = "Toute la journée"
TO_BE_DEFINED_LABEL = "À définir avec le professionnel"


class Status(str, Enum):
    PENDING = "EN_ATTENTE"
    CONFIRMED = "CONFIRMEE"
    IN_PROGRESS = "EN_COURS"
    COMPLETED = "TERMINEE"
    CANCELLED = "ANNULEE"


class Urgency(str, Enum):
    LOW = "FAIBLE"
    NORMAL = "NORMALE"
    HIGH = "ELEVEE"
    CRITICAL = "URGENTE"


class Granularity(str, Enum):
    WEEK = "week"
    MONTH = "month"


class Patient(BaseModel):
    id: str | None = None
    last_name: str = Field("", alias="nom")
    first_name: str = Field("", alias="prenom")

    model_config = {"populate_by_name": True}

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def initials(self) -> str:
        return f"{self.first_name[:1]}{self.last_name[:1]}".upper()


class Appointment(BaseModel):
    """A care request ("demande") as served by the persistence collaborator."""
    id: str
    scheduled_date: datetime | None = Field(None, alias="dateRdv")
    time_slot: str | None = Field(None, alias="heureRdv")  # free text, e.g. "9h00"
    status: Status = Field(Status.PENDING, alias="statut")
    urgency: Urgency = Field(Urgency.NORMAL, alias="urgence")
    patient_id: str | None = Field(None, alias="patientId")
    patient: Patient | None = None
    care_type: str | None = Field(None, alias="typeSoin")
    created_at: datetime | None = Field(None, alias="createdAt")

    model_config = {"populate_by_name": True}


class CanonicalSlot(BaseModel):
    """Either the all-day row (``hour is None``) or a one-hour bucket."""
    hour: int | None = Field(None, ge=0, le=23)

    model_config = {"frozen": True}

    @classmethod
    def at(cls, hour: int) -> "CanonicalSlot":
        return cls(hour=hour)

    @property
    def is_all_day(self) -> bool:
        return self.hour is None

    @property
    def key(self) -> str:
        return "all-day" if self.hour is None else str(self.hour)

    def __repr__(self) -> str:
        return "AllDay" if self.hour is None else f"Hour({self.hour})"


ALL_DAY = CanonicalSlot()


class GridCell(BaseModel):
    """A droppable cell. ``slot`` is None for day-level (month view) cells."""
    day: date
    slot: CanonicalSlot | None = None

    model_config = {"frozen": True}

    @property
    def cell_id(self) -> str:
        suffix = "day" if self.slot is None else self.slot.key
        return f"{self.day.isoformat()}:{suffix}"


class RescheduleIntent(BaseModel):
    appointment_id: str
    new_date: datetime
    new_time_slot: str

    def to_payload(self) -> dict:
        return {
            "id": self.appointment_id,
            "dateRdv": self.new_date.isoformat(),
            "heureRdv": self.new_time_slot,
        }


class OptimisticPatch(BaseModel):
    appointment_id: str
    previous_date: datetime | None = None
    previous_time_slot: str | None = None
    new_date: datetime
    new_time_slot: str
    confirmed: bool = False


class UpdateResult(BaseModel):
    success: bool
    error: str | None = None
    data: dict | None = None


class DateRange(BaseModel):
    start: datetime
    end: datetime
    title: str

    def contains_day(self, day: date) -> bool:
        return self.start.date() <= day <= self.end.date()

    def days(self) -> list[date]:
        first, last = self.start.date(), self.end.date()
        return [first + timedelta(days=i) for i in range((last - first).days + 1)]
