from __future__ import annotations

import csv
import io
from dataclasses import asdict
from datetime import date, datetime
from typing import Any, Optional

from flask import Flask, jsonify, request

from ..attendance.formatting import format_clock_time, format_early_by, format_late_by, status_label
from ..common.datetime_utils import parse_timestamp
from ..common.logging import get_logger
from ..common.validators import require_id_list, require_iso_date, require_non_empty
from ..container import Container
from ..core.constants import DEFAULT_REFRESH_INTERVAL_SECONDS
from ..core.exceptions import DataFetchError, ValidationError
from ..shifts.model import ShiftRecord
from .buckets import department_name
from .filters import Filters
from .service import DailyView

log = get_logger(__name__)

CSV_FIELDS = [
    "date",
    "shift_id",
    "department",
    "staff_name",
    "job_title",
    "shift_type",
    "start",
    "end",
    "hours",
    "status",
    "late_by",
    "clocked_in",
    "clocked_out",
    "published",
]


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def register(app: Flask, container: Container) -> None:
    tz = container.local_tz
    refresh_seconds = int(app.config.get("AUTO_REFRESH_SECONDS", DEFAULT_REFRESH_INTERVAL_SECONDS))

    def _reference_time(value: Optional[str]) -> Optional[datetime]:
        if not value:
            return None
        parsed = parse_timestamp(value)
        if parsed is None:
            raise ValidationError("at must be an ISO 8601 timestamp")
        return parsed

    def _shift_json(shift: ShiftRecord, view: DailyView) -> dict[str, Any]:
        details = view.attendance_details(shift)
        return {
            "id": shift.shift_id,
            "name": shift.shift_name,
            "staff_id": shift.staff_id,
            "staff_name": shift.staff_name,
            "job_title": shift.job_title,
            "department": department_name(shift),
            "date": _iso(shift.effective_date),
            "shift_type": container.shift_type_classifier.classify(shift).value,
            "start": format_clock_time(shift.start, tz),
            "end": format_clock_time(shift.end, tz),
            "is_overnight": shift.is_overnight,
            "break_minutes": shift.break_minutes,
            "hours": container.stats_aggregator.shift_hours(shift),
            "sleep_in": shift.sleep_in,
            "overtime": shift.overtime,
            "shift_leader": shift.shift_leader,
            "act_up": shift.act_up,
            "published": shift.is_published,
            "status": details.status.value,
            "status_label": status_label(details.status),
            "minutes_late": details.minutes_late,
            "late_by": format_late_by(details.minutes_late),
            "early_by": format_early_by(details.minutes_early),
            "clocked_in": format_clock_time(details.clocked_in, tz) if details.clocked_in else None,
            "clocked_out": format_clock_time(details.clocked_out, tz) if details.clocked_out else None,
            "has_ended": details.has_ended,
            "date_of_birth": _iso(view.date_of_birth(shift.staff_id)),
        }

    def _view_json(view: DailyView) -> dict[str, Any]:
        counts = container.attendance_classifier.count_by_status(view.filtered_shifts, view.reference_time)
        return {
            "date": view.selected_date.isoformat(),
            "reference_time": view.reference_time.isoformat(),
            "filters": asdict(view.filters),
            "stats": asdict(view.stats),
            "status_counts": {status.value: count for status, count in counts.items()},
            "departments": [
                {
                    "id": group.id,
                    "name": group.name,
                    "type": group.type.value,
                    "staff_count": group.staff_count,
                    "shifts": [_shift_json(s, view) for s in group.shifts],
                }
                for group in view.department_groups
            ],
            "staff_on_leave": [
                {**asdict(item), "start": _iso(item.start), "end": _iso(item.end)} for item in view.staff_on_leave
            ],
            "unassigned_shift_ids": [s.shift_id for s in view.unassigned_shifts],
            "unpublished_shift_ids": list(view.unpublished_shift_ids),
            "auto_refresh_seconds": refresh_seconds,
        }

    async def _load_view(args: Any) -> DailyView:
        return await container.daily_rota_service.daily_view(
            location_id=args.get("location_id") or None,
            sublocation_id=require_non_empty(args.get("sublocation_id"), "sublocation_id"),
            selected_date=require_iso_date(args.get("date"), "date"),
            rota_id=args.get("rota_id") or None,
            filters=Filters.from_mapping(args),
            reference_time=_reference_time(args.get("at")),
        )

    def _json_body() -> dict[str, Any]:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("JSON object body is required")
        return data

    def _require_bool(data: dict[str, Any], key: str) -> bool:
        value = data.get(key)
        if not isinstance(value, bool):
            raise ValidationError(f"{key} must be true or false")
        return value

    @app.errorhandler(ValidationError)
    def handle_validation_error(e: ValidationError):
        return jsonify({"success": False, "message": str(e)}), 400

    @app.errorhandler(DataFetchError)
    def handle_fetch_error(e: DataFetchError):
        log.error("daily.data_unavailable", error=str(e), path=request.path)
        return jsonify({"success": False, "message": "Rota data is unavailable, please retry"}), 502

    @app.route("/api/daily", methods=["GET"], endpoint="daily_view")
    async def daily_view():
        view = await _load_view(request.args)
        return jsonify(_view_json(view))

    @app.route("/api/daily.csv", methods=["GET"], endpoint="daily_view_csv")
    async def daily_view_csv():
        view = await _load_view(request.args)

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for group in view.department_groups:
            for shift in group.shifts:
                row = _shift_json(shift, view)
                writer.writerow(
                    {
                        "date": row["date"],
                        "shift_id": row["id"],
                        "department": group.name,
                        "staff_name": row["staff_name"] or "Unassigned",
                        "job_title": row["job_title"] or "",
                        "shift_type": row["shift_type"],
                        "start": row["start"],
                        "end": row["end"],
                        "hours": row["hours"],
                        "status": row["status_label"],
                        "late_by": row["late_by"],
                        "clocked_in": row["clocked_in"] or "",
                        "clocked_out": row["clocked_out"] or "",
                        "published": "yes" if row["published"] else "no",
                    }
                )

        csv_bytes = out.getvalue().encode("utf-8-sig")
        filename = f"daily_rota_{view.selected_date.strftime('%Y%m%d')}.csv"
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/daily/publish", methods=["POST"], endpoint="daily_publish")
    async def daily_publish():
        data = _json_body()
        if "shift_ids" in data:
            shift_ids = require_id_list(data.get("shift_ids"), "shift_ids")
            await container.repository.publish_shifts(shift_ids=shift_ids)
            return jsonify({"success": True, "published": shift_ids})

        view = await _load_view(data)
        published = await container.daily_rota_service.publish_unpublished(view)
        return jsonify({"success": True, "published": list(published)})

    @app.route("/api/shifts/<shift_id>/assignment", methods=["POST"], endpoint="shift_assign")
    async def shift_assign(shift_id: str):
        staff_id = require_non_empty(_json_body().get("staff_id"), "staff_id")
        await container.daily_rota_service.assign_staff(shift_id=shift_id, staff_id=staff_id)
        log.info("shift.assigned", shift_id=shift_id, staff_id=staff_id)
        return jsonify({"success": True})

    @app.route("/api/shifts/<shift_id>/assignment", methods=["DELETE"], endpoint="shift_unassign")
    async def shift_unassign(shift_id: str):
        await container.daily_rota_service.unassign_staff(shift_id=shift_id)
        log.info("shift.unassigned", shift_id=shift_id)
        return jsonify({"success": True})

    @app.route("/api/shifts/<shift_id>/leadership", methods=["PATCH"], endpoint="shift_leadership")
    async def shift_leadership(shift_id: str):
        data = _json_body()
        shift_leader = _require_bool(data, "shift_leader")
        act_up = _require_bool(data, "act_up")
        await container.daily_rota_service.update_leadership(shift_id=shift_id, shift_leader=shift_leader, act_up=act_up)
        return jsonify({"success": True, "shift_leader": shift_leader, "act_up": act_up})
