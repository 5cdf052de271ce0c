"""Planning board: one view's navigator, grid and drag controller over a shared store."""
from __future__ import annotations

from datetime import date

from .coordinator import OptimisticUpdateCoordinator
from .drag import DragRescheduleController
from .grid import bucket, bucket_by_day, filter_in_range
from .models import Appointment, DateRange, Granularity
from .navigation import ViewNavigator
from .slots import WEEK_GRID, SlotGrid
from .stats import PeriodStats, period_stats


class PlanningBoard:
    def __init__(
        self,
        coordinator: OptimisticUpdateCoordinator,
        navigator: ViewNavigator | None = None,
        grid: SlotGrid = WEEK_GRID,
    ):
        self.coordinator = coordinator
        self.store = coordinator.store
        self.navigator = navigator or ViewNavigator()
        self.grid = grid
        self.drag = self._controller()

    def _controller(self) -> DragRescheduleController:
        slots = self.grid.slots() if self.navigator.granularity == Granularity.WEEK else None
        return DragRescheduleController(on_reschedule=self.coordinator.apply, slots=slots)

    @property
    def range(self) -> DateRange:
        return self.navigator.range

    @property
    def visible(self) -> list[Appointment]:
        return filter_in_range(self.store.appointments, self.range)

    def cells(self) -> dict:
        """Week view: ``{(day, slot): [...]}``. Month view: ``{day: [...]}``."""
        days = self.navigator.days
        if self.navigator.granularity == Granularity.WEEK:
            return bucket(self.visible, days, self.grid.slots())
        return bucket_by_day(self.visible, days)

    def stats(self) -> PeriodStats:
        return period_stats(self.store.appointments, self.range)

    def switch_view(self, granularity: Granularity) -> DateRange:
        self.drag.cancel()
        date_range = self.navigator.set_granularity(granularity)
        self.drag = self._controller()
        return date_range

    def go_to(self, anchor: date) -> DateRange:
        self.navigator.anchor = anchor
        return self.range
