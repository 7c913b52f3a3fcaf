from __future__ import annotations

from enum import Enum, IntEnum


class AttendanceStatus(str, Enum):
    """Derived attendance state of a single shift."""

    SCHEDULED = "scheduled"
    PRESENT = "present"
    LATE = "late"
    WORKED = "worked"
    ABSENT = "absent"


class ShiftType(str, Enum):
    DAY = "day"
    NIGHT = "night"
    SLEEP_IN = "sleepin"


class DepartmentType(str, Enum):
    """Kind of group a shift lands in on the daily view."""

    REGULAR = "regular"
    AGENCY = "agency"
    OTHER_LOCATIONS = "other-locations"
    UNASSIGNED = "unassigned"


class ShiftStatusCode(IntEnum):
    """Status codes stored on a shift row by the data platform."""

    PUBLISHED = 1001
    ABSENT = 1002
    UNPUBLISHED = 1009
