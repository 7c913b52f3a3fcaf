from __future__ import annotations

import asyncio
from datetime import date, timedelta
from typing import Any, Optional, Sequence

from ..common.datetime_utils import parse_day
from ..common.logging import get_logger
from ..core.enums import ShiftStatusCode
from ..core.exceptions import DataFetchError
from ..shifts.model import ShiftRecord
from ..staff.model import LeaveInterval, StaffRecord
from .clocks import merge_clock_data
from .dataverse_client import DataverseClient, QueryOptions
from .model import RotaWindow, TimesheetClock
from .repository import RotaRepository

log = get_logger(__name__)

SHIFTS = "cp365_shifts"
SUBLOCATION_STAFF = "cp365_sublocationstaffs"
ABSENCE_LOGS = "cp365_staffabsencelogs"
TIMESHEET_CLOCKS = "cp365_timesheetclocks"

APPROVED_ABSENCE = 3


def _staff_display_name(member: dict[str, Any], fallback: str) -> str:
    forename = (member.get("cp365_forename") or "").strip()
    surname = (member.get("cp365_surname") or "").strip()
    full = f"{forename} {surname}".strip()
    return full or member.get("cp365_staffmembername") or fallback or ""


class DataverseRotaRepository(RotaRepository):
    """Rota data from the Dataverse tables behind the care platform."""

    def __init__(self, client: DataverseClient, *, include_external_staff: bool = True):
        self._client = client
        self._include_external_staff = include_external_staff

    async def _shift_rows(self, rota_id: Optional[str], start: date, end: date) -> list[dict[str, Any]]:
        if not rota_id:
            return []
        return await self._client.get(
            SHIFTS,
            QueryOptions(
                filter=(
                    f"_cp365_rota_value eq '{rota_id}'"
                    f" and cp365_shiftdate ge {start.isoformat()} and cp365_shiftdate le {end.isoformat()}"
                    f" and (cp365_shiftstatus eq {int(ShiftStatusCode.PUBLISHED)}"
                    f" or cp365_shiftstatus eq {int(ShiftStatusCode.UNPUBLISHED)})"
                ),
                select=(
                    "cp365_shiftid",
                    "cp365_shiftname",
                    "cp365_shiftdate",
                    "cp365_shiftstarttime",
                    "cp365_shiftendtime",
                    "cp365_shiftstatus",
                    "cr1e2_shiftbreakduration",
                    "_cp365_staffmember_value",
                    "_cp365_rota_value",
                    "cp365_shiftleader",
                    "cp365_actup",
                    "cp365_overtimeshift",
                    "cp365_sleepin",
                ),
                orderby="cp365_shiftdate asc,cp365_shiftstarttime asc",
                top=500,
            ),
        )

    async def _staff_rows(self, sublocation_id: str) -> list[dict[str, Any]]:
        return await self._client.get(
            SUBLOCATION_STAFF,
            QueryOptions(
                filter=f"_cp365_sublocation_value eq '{sublocation_id}' and statecode eq 0",
                select=("cp365_sublocationstaffid", "cp365_sublocationstaffname", "_cp365_staffmember_value"),
                expand=(
                    "cp365_StaffMember($select=cp365_staffmemberid,cp365_staffmembername,cp365_forename,"
                    "cp365_surname,cp365_dateofbirth,_cp365_jobtitle_value;"
                    "$expand=cp365_JobTitle($select=cp365_jobtitlename))",
                ),
                orderby="cp365_sublocationstaffname asc",
                top=200,
            ),
        )

    async def _leave_rows(self, start: date, end: date) -> list[dict[str, Any]]:
        return await self._client.get(
            ABSENCE_LOGS,
            QueryOptions(
                filter=(
                    f"cp365_absencestatus eq {APPROVED_ABSENCE}"
                    f" and cp365_absencestart le {end.isoformat()} and cp365_absenceend ge {start.isoformat()}"
                ),
                select=(
                    "cp365_staffabsencelogid",
                    "cp365_absencestart",
                    "cp365_absenceend",
                    "cp365_sensitive",
                    "_cp365_staffmember_value",
                ),
                expand=("cp365_AbsenceType($select=cp365_absencetypename,cp365_sensitive)",),
            ),
        )

    async def _clock_rows(self, start: date, end: date) -> list[dict[str, Any]]:
        try:
            return await self._client.get(
                TIMESHEET_CLOCKS,
                QueryOptions(
                    filter=(
                        f"cp365_submittedstarttime ge {start.isoformat()}T00:00:00Z"
                        f" and cp365_submittedstarttime lt {end.isoformat()}T23:59:59Z"
                    ),
                    select=(
                        "cp365_timesheetclockid",
                        "cp365_submittedstarttime",
                        "cp365_submittedendtime",
                        "_cp365_staffmember_value",
                        "_cp365_shift_value",
                    ),
                    orderby="cp365_submittedstarttime asc",
                ),
            )
        except DataFetchError as e:
            # attendance falls back to scheduled/late without clock data
            log.warning("rota.clocks_unavailable", error=str(e))
            return []

    @staticmethod
    def _to_staff(row: dict[str, Any], leave: Sequence[LeaveInterval]) -> StaffRecord:
        member = row.get("cp365_StaffMember") or {}
        job_title = (member.get("cp365_JobTitle") or {}).get("cp365_jobtitlename")
        return StaffRecord(
            staff_id=row.get("_cp365_staffmember_value") or "",
            name=_staff_display_name(member, row.get("cp365_sublocationstaffname") or ""),
            job_title=job_title or None,
            date_of_birth=parse_day(member.get("cp365_dateofbirth")),
            leave=tuple(leave),
        )

    @staticmethod
    def _to_leave(row: dict[str, Any]) -> LeaveInterval:
        absence_type = row.get("cp365_AbsenceType") or {}
        return LeaveInterval.from_view_row(
            {
                "Start Date": row.get("cp365_absencestart"),
                "End Date": row.get("cp365_absenceend"),
                "Sensitive": row.get("cp365_sensitive") or absence_type.get("cp365_sensitive"),
                "Leave Type": absence_type.get("cp365_absencetypename"),
            }
        )

    @staticmethod
    def _to_shift(row: dict[str, Any], staff_name: str, is_external: bool) -> ShiftRecord:
        return ShiftRecord.from_view_row(
            {
                "Shift ID": row.get("cp365_shiftid"),
                "Shift Name": row.get("cp365_shiftname"),
                "Shift Date": row.get("cp365_shiftdate"),
                "Shift Start Time": row.get("cp365_shiftstarttime"),
                "Shift End Time": row.get("cp365_shiftendtime"),
                "Shift Status": row.get("cp365_shiftstatus"),
                "Shift Break Duration": row.get("cr1e2_shiftbreakduration"),
                "Staff Member ID": row.get("_cp365_staffmember_value"),
                "Staff Member Name": staff_name,
                "Rota ID": row.get("_cp365_rota_value"),
                "Shift Leader": row.get("cp365_shiftleader"),
                "Act Up": row.get("cp365_actup"),
                "Overtime Shift": row.get("cp365_overtimeshift"),
                "Sleep In": row.get("cp365_sleepin"),
                "Is External Staff": is_external,
            }
        )

    async def fetch_rota_window(
        self,
        location_id: Optional[str],
        sublocation_id: str,
        start_date: date,
        window_days: int,
        rota_id: Optional[str] = None,
    ) -> RotaWindow:
        end_date = start_date + timedelta(days=max(window_days, 1) - 1)
        log.info("rota.fetch_window", location_id=location_id, sublocation_id=sublocation_id, start=start_date.isoformat(), days=window_days, rota_id=rota_id)

        shift_rows, staff_rows, leave_rows, clock_rows = await asyncio.gather(
            self._shift_rows(rota_id, start_date, end_date),
            self._staff_rows(sublocation_id),
            self._leave_rows(start_date, end_date),
            self._clock_rows(start_date, end_date),
        )

        leave_by_staff: dict[str, list[LeaveInterval]] = {}
        for row in leave_rows:
            staff_id = row.get("_cp365_staffmember_value")
            if staff_id:
                leave_by_staff.setdefault(staff_id, []).append(self._to_leave(row))

        staff = tuple(
            self._to_staff(row, leave_by_staff.get(row.get("_cp365_staffmember_value") or "", ()))
            for row in staff_rows
            if row.get("_cp365_staffmember_value")
        )
        names = {s.staff_id: s.name for s in staff}

        shifts: list[ShiftRecord] = []
        for row in shift_rows:
            staff_id = row.get("_cp365_staffmember_value")
            is_external = bool(staff_id) and staff_id not in names
            if is_external and not self._include_external_staff:
                continue
            shifts.append(self._to_shift(row, names.get(staff_id or "", ""), is_external))

        clocks = [
            TimesheetClock(
                clock_id=row.get("cp365_timesheetclockid") or "",
                staff_id=row.get("_cp365_staffmember_value"),
                shift_id=row.get("_cp365_shift_value"),
                clocked_in=row.get("cp365_submittedstarttime"),
                clocked_out=row.get("cp365_submittedendtime"),
            )
            for row in clock_rows
        ]

        return RotaWindow(
            shifts=merge_clock_data(shifts, clocks),
            staff=staff,
            start_date=start_date,
            window_days=window_days,
        )

    async def assign_staff(self, *, shift_id: str, staff_id: str) -> None:
        await self._client.update(SHIFTS, shift_id, {"cp365_StaffMember@odata.bind": f"/cp365_staffmembers({staff_id})"})

    async def unassign_staff(self, *, shift_id: str) -> None:
        await self._client.delete_reference(SHIFTS, shift_id, "cp365_StaffMember")

    async def publish_shifts(self, *, shift_ids: Sequence[str]) -> None:
        for shift_id in shift_ids:
            await self._client.update(SHIFTS, shift_id, {"cp365_shiftstatus": int(ShiftStatusCode.PUBLISHED)})

    async def update_leadership(self, *, shift_id: str, shift_leader: bool, act_up: bool) -> None:
        await self._client.update(SHIFTS, shift_id, {"cp365_shiftleader": bool(shift_leader), "cp365_actup": bool(act_up)})
