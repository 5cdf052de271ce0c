from datetime import date, datetime
import pytest
from demandes_planning.board import PlanningBoard
from demandes_planning.coordinator import OptimisticUpdateCoordinator
from demandes_planning.models import ALL_DAY, Appointment, CanonicalSlot, GridCell, Granularity, UpdateResult
from demandes_planning.navigation import ViewNavigator
from demandes_planning.store import AppointmentStore

A1 = Appointment(id="A1", scheduled_date=datetime(2024, 6, 10), time_slot="9h00")
A2 = Appointment(id="A2", scheduled_date=datetime(2024, 6, 10))


class ConflictGateway:
    def __init__(self):
        self.updates = []

    async def update_schedule(self, intent):
        self.updates.append(intent)
        return UpdateResult(success=False, error="conflict")

    async def list_appointments(self):
        return [A1, A2]


@pytest.mark.asyncio
async def test_drag_round_trip_on_week_board():
    gateway = ConflictGateway()
    notes = []
    coord = OptimisticUpdateCoordinator(AppointmentStore([A1, A2]), gateway, notify=notes.append)
    board = PlanningBoard(coord, ViewNavigator(date(2024, 6, 12)))

    target = GridCell(day=date(2024, 6, 12), slot=CanonicalSlot.at(14))
    board.drag.press(A1, 0, 0)
    board.drag.move(30, 0)
    board.drag.enter(target)
    intent = board.drag.release()

    assert intent.new_time_slot == "14h"
    assert board.cells()[(date(2024, 6, 12), CanonicalSlot.at(14))][0].id == "A1"

    await coord.drain()
    assert notes == ["Erreur: conflict"]
    cells = board.cells()
    assert [a.id for a in cells[(date(2024, 6, 10), CanonicalSlot.at(9))]] == ["A1"]
    assert [a.id for a in cells[(date(2024, 6, 10), ALL_DAY)]] == ["A2"]
    assert cells[(date(2024, 6, 12), CanonicalSlot.at(14))] == []

@pytest.mark.asyncio
async def test_no_op_drop_issues_no_call():
    gateway = ConflictGateway()
    coord = OptimisticUpdateCoordinator(AppointmentStore([A1, A2]), gateway)
    board = PlanningBoard(coord, ViewNavigator(date(2024, 6, 12)))

    board.drag.press(A1, 0, 0)
    board.drag.move(30, 0)
    board.drag.enter(GridCell(day=date(2024, 6, 10), slot=CanonicalSlot.at(9)))
    assert board.drag.release() is None
    await coord.drain()
    assert gateway.updates == []
    assert coord.store.get("A1") is A1

def test_switching_to_month_view():
    coord = OptimisticUpdateCoordinator(AppointmentStore([A1, A2]), ConflictGateway())
    board = PlanningBoard(coord, ViewNavigator(date(2024, 6, 12)))
    assert board.stats().total == 2

    r = board.switch_view(Granularity.MONTH)
    assert r.title == "juin 2024"
    assert board.drag.slots is None
    assert [a.id for a in board.cells()[date(2024, 6, 10)]] == ["A1", "A2"]
    assert board.go_to(date(2024, 7, 1)).title == "juillet 2024"
    assert board.visible == []

@pytest.mark.asyncio
async def test_drop_after_appointment_left_the_list():
    gateway = ConflictGateway()
    coord = OptimisticUpdateCoordinator(AppointmentStore([A1, A2]), gateway)
    board = PlanningBoard(coord, ViewNavigator(date(2024, 6, 12)))

    board.drag.press(A1, 0, 0)
    board.drag.move(30, 0)
    board.drag.enter(GridCell(day=date(2024, 6, 12), slot=CanonicalSlot.at(14)))
    coord.store.replace_all([])  # a reload landed mid-drag

    assert board.drag.release().new_time_slot == "14h"
    await coord.drain()
    assert gateway.updates == []
    assert coord.store.appointments == ()

@pytest.mark.asyncio
async def test_drop_after_close_does_not_raise():
    gateway = ConflictGateway()
    coord = OptimisticUpdateCoordinator(AppointmentStore([A1, A2]), gateway)
    board = PlanningBoard(coord, ViewNavigator(date(2024, 6, 12)))

    board.drag.press(A1, 0, 0)
    board.drag.move(30, 0)
    board.drag.enter(GridCell(day=date(2024, 6, 12), slot=CanonicalSlot.at(14)))
    coord.close()

    board.drag.release()
    assert gateway.updates == []
    assert coord.store.get("A1") is A1
