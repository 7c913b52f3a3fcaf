from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Sequence

from ..attendance.model import AttendanceDetails
from ..attendance.service import AttendanceClassifier
from ..common.logging import get_logger
from ..core.constants import DEFAULT_ROTA_WINDOW_DAYS
from ..core.enums import AttendanceStatus
from ..rota.model import RotaWindow
from ..rota.repository import RotaRepository
from ..shifts.classifier import ShiftTypeClassifier
from ..shifts.model import ShiftRecord
from ..stats.model import DailyStats, StaffOnLeaveItem
from ..stats.service import StatsAggregator
from .buckets import DepartmentBucketizer, DepartmentGroup
from .filters import Filters, ShiftFilterPipeline

log = get_logger(__name__)


def shifts_for_date(shifts: Sequence[ShiftRecord], selected_date: date) -> tuple[ShiftRecord, ...]:
    """Exact date match against the shift date (falling back to the start date)."""
    return tuple(s for s in shifts if s.effective_date == selected_date)


@dataclass(frozen=True)
class DailyView:
    """Everything one render of the daily rota needs, derived in one pass."""

    selected_date: date
    reference_time: datetime
    filters: Filters
    filtered_shifts: tuple[ShiftRecord, ...]
    department_groups: tuple[DepartmentGroup, ...]
    stats: DailyStats
    staff_on_leave: tuple[StaffOnLeaveItem, ...]
    staff_date_of_birth: tuple[tuple[str, Optional[date]], ...] = ()
    classifier: AttendanceClassifier = field(default_factory=AttendanceClassifier, compare=False, repr=False)

    def attendance_status(self, shift: ShiftRecord) -> AttendanceStatus:
        return self.classifier.classify(shift, self.reference_time)

    def attendance_details(self, shift: ShiftRecord) -> AttendanceDetails:
        return self.classifier.details(shift, self.reference_time)

    def date_of_birth(self, staff_id: Optional[str]) -> Optional[date]:
        return next((dob for sid, dob in self.staff_date_of_birth if sid == staff_id), None)

    @property
    def unassigned_shifts(self) -> tuple[ShiftRecord, ...]:
        return tuple(s for s in self.filtered_shifts if not s.is_assigned)

    @property
    def unpublished_shift_ids(self) -> tuple[str, ...]:
        return tuple(s.shift_id for s in self.filtered_shifts if not s.is_published)


class DailyViewBuilder:
    """shifts-for-date -> filter -> bucketize -> aggregate.

    Pure and synchronous: no I/O, and the same snapshot, filters and reference
    time always produce an equal DailyView.
    """

    def __init__(
        self,
        *,
        classifier: AttendanceClassifier | None = None,
        shift_types: ShiftTypeClassifier | None = None,
        pipeline: ShiftFilterPipeline | None = None,
        bucketizer: DepartmentBucketizer | None = None,
        aggregator: StatsAggregator | None = None,
    ):
        self._classifier = classifier or AttendanceClassifier()
        self._pipeline = pipeline or ShiftFilterPipeline(attendance=self._classifier, shift_types=shift_types)
        self._bucketizer = bucketizer or DepartmentBucketizer()
        self._aggregator = aggregator or StatsAggregator()

    def build(
        self,
        window: RotaWindow,
        *,
        selected_date: date,
        filters: Filters | None = None,
        reference_time: Optional[datetime] = None,
    ) -> DailyView:
        filters = filters or Filters()
        now = self._classifier.resolve_reference(reference_time)

        day_shifts = shifts_for_date(window.shifts, selected_date)
        filtered = self._pipeline.filter(day_shifts, filters, now)
        groups = self._bucketizer.bucketize(filtered, filters.department)
        stats = self._aggregator.aggregate(filtered, window.staff, selected_date)

        return DailyView(
            selected_date=selected_date,
            reference_time=now,
            filters=filters,
            filtered_shifts=filtered,
            department_groups=groups,
            stats=stats,
            staff_on_leave=self._aggregator.staff_on_leave(window.staff, selected_date),
            staff_date_of_birth=tuple((s.staff_id, s.date_of_birth) for s in window.staff),
            classifier=self._classifier,
        )


class DailyRotaService:
    """Loads rota windows from the data provider and runs the day's mutations."""

    def __init__(
        self,
        repository: RotaRepository,
        *,
        builder: DailyViewBuilder | None = None,
        window_days: int = DEFAULT_ROTA_WINDOW_DAYS,
    ):
        self._repository = repository
        self._builder = builder or DailyViewBuilder()
        self._window_days = int(window_days)

    async def load_window(
        self,
        *,
        location_id: Optional[str],
        sublocation_id: str,
        selected_date: date,
        rota_id: Optional[str] = None,
    ) -> RotaWindow:
        return await self._repository.fetch_rota_window(
            location_id, sublocation_id, selected_date, self._window_days, rota_id
        )

    async def daily_view(
        self,
        *,
        location_id: Optional[str],
        sublocation_id: str,
        selected_date: date,
        rota_id: Optional[str] = None,
        filters: Filters | None = None,
        reference_time: Optional[datetime] = None,
    ) -> DailyView:
        window = await self.load_window(
            location_id=location_id, sublocation_id=sublocation_id, selected_date=selected_date, rota_id=rota_id
        )
        return self._builder.build(window, selected_date=selected_date, filters=filters, reference_time=reference_time)

    async def publish_unpublished(self, view: DailyView) -> tuple[str, ...]:
        shift_ids = view.unpublished_shift_ids
        if not shift_ids:
            return ()
        await self._repository.publish_shifts(shift_ids=shift_ids)
        log.info("daily.published", date=view.selected_date.isoformat(), count=len(shift_ids))
        return shift_ids

    async def assign_staff(self, *, shift_id: str, staff_id: str) -> None:
        await self._repository.assign_staff(shift_id=shift_id, staff_id=staff_id)

    async def unassign_staff(self, *, shift_id: str) -> None:
        await self._repository.unassign_staff(shift_id=shift_id)

    async def update_leadership(self, *, shift_id: str, shift_leader: bool, act_up: bool) -> None:
        await self._repository.update_leadership(shift_id=shift_id, shift_leader=shift_leader, act_up=act_up)
