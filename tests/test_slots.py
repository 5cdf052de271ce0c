import pytest
from demandes_planning.models import ALL_DAY, CanonicalSlot
from demandes_planning.slots import COMPACT_GRID, WEEK_GRID, SlotGrid, canonicalize, resolve


@pytest.mark.parametrize("raw", ["9h", "09h00", "9:00", "09:30", " 9h "])
def test_hour_shapes(raw):
    assert resolve(raw) == CanonicalSlot.at(9)

@pytest.mark.parametrize("raw", [None, "", "   ", "Toute la journée", "À définir avec le professionnel"])
def test_all_day_sentinels(raw):
    assert resolve(raw) == ALL_DAY

@pytest.mark.parametrize("raw", ["matin", "après-midi", "14", "99h", "h00", "dans 2 heures", "9 h", "9H"])
def test_unparsable_degrades_to_all_day(raw):
    assert resolve(raw) == ALL_DAY

def test_first_hour_wins():
    assert resolve("10:30 - 11h30") == CanonicalSlot.at(10)
    assert resolve("vers 14h") == CanonicalSlot.at(14)

def test_canonicalize_round_trips():
    for slot in [ALL_DAY, CanonicalSlot.at(0), CanonicalSlot.at(14)]:
        assert resolve(canonicalize(slot)) == slot
    assert canonicalize(CanonicalSlot.at(14)) == "14h"
    assert canonicalize(ALL_DAY) == "Toute la journée"

def test_default_grids():
    assert WEEK_GRID.slots()[0] == ALL_DAY
    assert [s.hour for s in WEEK_GRID.slots()[1:]] == list(range(5, 21))
    assert [s.hour for s in COMPACT_GRID.slots()[1:]] == list(range(8, 20))
    assert CanonicalSlot.at(4) not in WEEK_GRID
    assert CanonicalSlot.at(20) in WEEK_GRID

def test_grid_bounds_are_validated():
    with pytest.raises(ValueError):
        SlotGrid(12, 8)
    assert ALL_DAY not in SlotGrid(8, 9, include_all_day=False)
