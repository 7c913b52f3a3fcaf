from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Sequence

from ..common.logging import get_logger
from ..core.constants import (
    AGENCY_GROUP_ID,
    AGENCY_GROUP_NAME,
    FILTER_ALL,
    GENERAL_DEPARTMENT,
    OTHER_LOCATIONS_GROUP_ID,
    OTHER_LOCATIONS_GROUP_NAME,
    UNASSIGNED_GROUP_ID,
    UNASSIGNED_GROUP_NAME,
)
from ..core.enums import DepartmentType
from ..shifts.model import ShiftRecord

log = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")


def department_id(name: str) -> str:
    return _WHITESPACE.sub("-", name.lower())


def department_name(shift: ShiftRecord) -> str:
    """Department label, else first team, else 'General'."""
    if shift.department:
        return shift.department
    if shift.teams:
        return shift.teams[0]
    return GENERAL_DEPARTMENT


@dataclass(frozen=True)
class DepartmentGroup:
    id: str
    name: str
    type: DepartmentType
    shifts: tuple[ShiftRecord, ...]
    staff_count: int


@dataclass
class ClassifiedShifts:
    unassigned: list[ShiftRecord] = field(default_factory=list)
    agency: list[ShiftRecord] = field(default_factory=list)
    other_locations: list[ShiftRecord] = field(default_factory=list)
    regular: dict[str, list[ShiftRecord]] = field(default_factory=dict)


class DepartmentBucketizer:
    """Partitions a filtered day into ordered department groups.

    Phase one puts every shift into exactly one bucket; phase two applies the
    ordering policy: unassigned, regular departments by name, agency, then
    other locations (only when the department selector allows it).
    """

    def classify(self, shifts: Sequence[ShiftRecord]) -> ClassifiedShifts:
        buckets = ClassifiedShifts()
        for shift in shifts:
            if not shift.is_assigned:
                buckets.unassigned.append(shift)
            elif shift.is_external_staff:
                buckets.other_locations.append(shift)
            elif shift.is_agency_staff:
                buckets.agency.append(shift)
            else:
                buckets.regular.setdefault(department_name(shift), []).append(shift)
        return buckets

    def resolve_department_filter(self, value: Any, known_departments: Sequence[str]) -> str:
        """Normalise the department selector; unrecognised values mean 'all'."""
        if not isinstance(value, str) or not value.strip():
            log.warning("buckets.unknown_department_filter", value=value)
            return FILTER_ALL

        value = value.strip()
        if value in (FILTER_ALL, DepartmentType.AGENCY.value, OTHER_LOCATIONS_GROUP_ID):
            return value

        wanted = value.lower()
        for name in known_departments:
            if wanted in (name.lower(), department_id(name)):
                return name

        log.warning("buckets.unknown_department_filter", value=value)
        return FILTER_ALL

    def bucketize(self, shifts: Sequence[ShiftRecord], department_filter: Any = FILTER_ALL) -> tuple[DepartmentGroup, ...]:
        buckets = self.classify(shifts)
        selector = self.resolve_department_filter(department_filter, list(buckets.regular))

        result: list[DepartmentGroup] = []

        if buckets.unassigned:
            result.append(
                DepartmentGroup(
                    id=UNASSIGNED_GROUP_ID,
                    name=UNASSIGNED_GROUP_NAME,
                    type=DepartmentType.UNASSIGNED,
                    shifts=tuple(buckets.unassigned),
                    staff_count=len(buckets.unassigned),
                )
            )

        for name in sorted(buckets.regular):
            dept_shifts = buckets.regular[name]
            result.append(
                DepartmentGroup(
                    id=department_id(name),
                    name=name,
                    type=DepartmentType.REGULAR,
                    shifts=tuple(dept_shifts),
                    staff_count=len({s.staff_id for s in dept_shifts if s.staff_id}),
                )
            )

        if buckets.agency:
            result.append(
                DepartmentGroup(
                    id=AGENCY_GROUP_ID,
                    name=AGENCY_GROUP_NAME,
                    type=DepartmentType.AGENCY,
                    shifts=tuple(buckets.agency),
                    staff_count=len(buckets.agency),
                )
            )

        if buckets.other_locations and selector in (FILTER_ALL, OTHER_LOCATIONS_GROUP_ID):
            result.append(
                DepartmentGroup(
                    id=OTHER_LOCATIONS_GROUP_ID,
                    name=OTHER_LOCATIONS_GROUP_NAME,
                    type=DepartmentType.OTHER_LOCATIONS,
                    shifts=tuple(buckets.other_locations),
                    staff_count=len(buckets.other_locations),
                )
            )

        return tuple(result)
