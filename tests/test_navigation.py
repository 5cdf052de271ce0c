from datetime import date, datetime, timedelta
import pytest
from demandes_planning.models import Granularity
from demandes_planning.navigation import ViewNavigator, add_months, current_range, days_in_view


@pytest.mark.parametrize("offset", range(14))
def test_week_starts_on_monday(offset):
    anchor = date(2024, 6, 3) + timedelta(days=offset)
    r = current_range(anchor, Granularity.WEEK)
    assert r.start.weekday() == 0
    assert r.end.date() - r.start.date() == timedelta(days=6)
    assert r.start.time() == datetime.min.time()
    assert (r.end.hour, r.end.minute, r.end.second, r.end.microsecond) == (23, 59, 59, 999000)

def test_sunday_belongs_to_previous_monday():
    r = current_range(date(2024, 6, 16), Granularity.WEEK)
    assert r.start.date() == date(2024, 6, 10)
    assert r.title == "10 juin - 16 juin 2024"

def test_month_range():
    r = current_range(datetime(2024, 2, 14, 15, 0), Granularity.MONTH)
    assert r.start == datetime(2024, 2, 1)
    assert r.end.date() == date(2024, 2, 29)
    assert r.title == "février 2024"

def test_month_view_pads_to_whole_weeks():
    days = days_in_view(current_range(date(2024, 6, 5), Granularity.MONTH), Granularity.MONTH)
    assert days[0] == date(2024, 5, 27)
    assert days[-1] == date(2024, 6, 30)
    assert len(days) % 7 == 0

def test_add_months_clamps():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2024, 1, 15), -1) == date(2023, 12, 15)
    assert add_months(date(2024, 11, 30), 14) == date(2026, 1, 30)

def test_week_navigation_composes():
    nav = ViewNavigator(date(2024, 6, 12))
    start = nav.range
    nav.next()
    assert nav.range.start == start.start + timedelta(days=7)
    nav.previous()
    assert nav.range == start
    assert nav.anchor == date(2024, 6, 12)

def test_month_navigation_uses_calendar_months():
    nav = ViewNavigator(date(2024, 1, 15), Granularity.MONTH)
    assert nav.next().title == "février 2024"
    assert nav.previous().title == "janvier 2024"
    assert nav.previous().title == "décembre 2023"

def test_go_to_today():
    nav = ViewNavigator(date(2020, 1, 1), today=lambda: date(2024, 6, 12))
    r = nav.go_to_today()
    assert nav.anchor == date(2024, 6, 12)
    assert r.start.date() == date(2024, 6, 10)
    assert nav.set_granularity(Granularity.MONTH).title == "juin 2024"
