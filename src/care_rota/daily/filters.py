from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..attendance.service import AttendanceClassifier
from ..common.logging import get_logger
from ..core.constants import FILTER_ALL
from ..core.enums import AttendanceStatus, ShiftType
from ..shifts.classifier import ShiftTypeClassifier
from ..shifts.model import ShiftRecord

log = get_logger(__name__)


@dataclass(frozen=True)
class Filters:
    search: str = ""
    department: str = FILTER_ALL
    status: str = FILTER_ALL
    shift_type: str = FILTER_ALL

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "Filters":
        def pick(key: str, default: str) -> str:
            value = values.get(key)
            return str(value).strip() if value else default

        return cls(
            search=pick("search", ""),
            department=pick("department", FILTER_ALL),
            status=pick("status", FILTER_ALL).lower(),
            shift_type=pick("shift_type", FILTER_ALL).lower(),
        )


def _selector(value: str, allowed: type, field_name: str):
    """Resolve a selector to an enum member, or None for 'all'.

    Unknown values fail open: they are logged and treated as 'all'.
    """
    if value == FILTER_ALL:
        return None
    try:
        return allowed(value)
    except ValueError:
        log.warning("filter.unknown_selector", field=field_name, value=value)
        return None


class ShiftFilterPipeline:
    """Search, status and shift-type narrowing over a day's shifts.

    The department selector is not applied here; it only affects
    which groups the bucketizer shows.
    """

    def __init__(
        self,
        *,
        attendance: AttendanceClassifier | None = None,
        shift_types: ShiftTypeClassifier | None = None,
    ):
        self._attendance = attendance or AttendanceClassifier()
        self._shift_types = shift_types or ShiftTypeClassifier()

    def filter(
        self,
        shifts: Sequence[ShiftRecord],
        filters: Filters,
        reference_time: Optional[datetime] = None,
    ) -> tuple[ShiftRecord, ...]:
        result = tuple(shifts)

        search = filters.search.strip().lower()
        if search:
            result = tuple(s for s in result if s.is_assigned and search in s.staff_name.lower())

        status = _selector(filters.status, AttendanceStatus, "status")
        if status is not None:
            now = self._attendance.resolve_reference(reference_time)
            result = tuple(s for s in result if self._attendance.classify(s, now) == status)

        shift_type = _selector(filters.shift_type, ShiftType, "shift_type")
        if shift_type is not None:
            result = tuple(s for s in result if self._shift_types.classify(s) == shift_type)

        return result
