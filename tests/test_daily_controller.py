from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional

import pytest

from care_rota.core.enums import ShiftStatusCode
from care_rota.core.exceptions import DataverseError
from care_rota.main import create_app
from care_rota.rota.model import RotaWindow
from care_rota.shifts.model import ShiftRecord
from care_rota.staff.model import StaffRecord

DAY = date(2026, 2, 10)


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 2, 10, hour, minute, tzinfo=timezone.utc)


@dataclass
class InMemoryRota:
    window: RotaWindow
    fail: bool = False
    calls: list[tuple] = field(default_factory=list)

    async def fetch_rota_window(self, location_id, sublocation_id, start_date, window_days, rota_id=None):
        self.calls.append(("fetch", sublocation_id, start_date, window_days, rota_id))
        if self.fail:
            raise DataverseError("Service unavailable", 503)
        return self.window

    async def assign_staff(self, *, shift_id: str, staff_id: str) -> None:
        self.calls.append(("assign", shift_id, staff_id))

    async def unassign_staff(self, *, shift_id: str) -> None:
        self.calls.append(("unassign", shift_id))

    async def publish_shifts(self, *, shift_ids) -> None:
        self.calls.append(("publish", tuple(shift_ids)))

    async def update_leadership(self, *, shift_id: str, shift_leader: bool, act_up: bool) -> None:
        self.calls.append(("leadership", shift_id, shift_leader, act_up))


def _window() -> RotaWindow:
    return RotaWindow(
        shifts=(
            ShiftRecord(shift_id="u1", shift_date=DAY, start=_at(8), end=_at(16)),
            ShiftRecord(
                shift_id="n1", staff_id="s1", staff_name="Amy Pond", department="Nursing",
                shift_date=DAY, start=_at(9), end=_at(17), break_minutes=30,
                status_code=int(ShiftStatusCode.PUBLISHED), clocked_in=_at(9, 10),
            ),
        ),
        staff=(StaffRecord(staff_id="s1", name="Amy Pond", date_of_birth=date(1990, 5, 1)),),
        start_date=DAY,
        window_days=7,
    )


@pytest.fixture
def rota() -> InMemoryRota:
    return InMemoryRota(window=_window())


@pytest.fixture
def client(monkeypatch, rota: InMemoryRota):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(repository=rota)
    return app.test_client()


QUERY = "sublocation_id=sub-1&rota_id=rota-1&date=2026-02-10&at=2026-02-10T10:00:00Z"


def test_daily_view_json(client, rota: InMemoryRota):
    resp = client.get(f"/api/daily?{QUERY}")
    assert resp.status_code == 200

    body = resp.get_json()
    assert body["date"] == "2026-02-10"
    assert [d["id"] for d in body["departments"]] == ["unassigned-shifts", "nursing"]
    assert body["stats"]["unassigned_count"] == 1
    assert body["stats"]["total_hours"] == 15.5
    assert body["unpublished_shift_ids"] == ["u1"]
    assert body["status_counts"]["late"] == 1
    assert body["status_counts"]["present"] == 1

    amy = body["departments"][1]["shifts"][0]
    assert amy["status"] == "present"
    assert amy["late_by"] == "10 min"
    assert amy["clocked_in"] == "09:10"
    assert amy["date_of_birth"] == "1990-05-01"
    assert rota.calls[0] == ("fetch", "sub-1", DAY, 7, "rota-1")


def test_daily_view_applies_filters(client):
    body = client.get(f"/api/daily?{QUERY}&status=late").get_json()

    assert [d["id"] for d in body["departments"]] == ["unassigned-shifts"]
    assert body["filters"]["status"] == "late"


def test_daily_view_requires_date(client):
    resp = client.get("/api/daily?sublocation_id=sub-1&date=10/02/2026")

    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_data_provider_failure_is_502(client, rota: InMemoryRota):
    rota.fail = True
    resp = client.get(f"/api/daily?{QUERY}")

    assert resp.status_code == 502


def test_csv_export(client):
    resp = client.get(f"/api/daily.csv?{QUERY}")

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    text = resp.data.decode("utf-8-sig")
    lines = text.strip().splitlines()
    assert lines[0].startswith("date,shift_id,department")
    assert len(lines) == 3
    assert "Unassigned" in lines[1]
    assert "Amy Pond" in lines[2]


def test_publish_unpublished(client, rota: InMemoryRota):
    resp = client.post(
        "/api/daily/publish", json={"sublocation_id": "sub-1", "rota_id": "rota-1", "date": "2026-02-10"}
    )

    assert resp.get_json() == {"success": True, "published": ["u1"]}
    assert rota.calls[-1] == ("publish", ("u1",))


def test_publish_explicit_ids(client, rota: InMemoryRota):
    resp = client.post("/api/daily/publish", json={"shift_ids": ["a", "b"]})

    assert resp.status_code == 200
    assert rota.calls[-1] == ("publish", ("a", "b"))


def test_assignment_endpoints(client, rota: InMemoryRota):
    assert client.post("/api/shifts/u1/assignment", json={"staff_id": "s1"}).status_code == 200
    assert client.delete("/api/shifts/u1/assignment").status_code == 200
    assert client.post("/api/shifts/u1/assignment", json={}).status_code == 400

    assert rota.calls == [("assign", "u1", "s1"), ("unassign", "u1")]


def test_leadership_requires_booleans(client, rota: InMemoryRota):
    ok = client.patch("/api/shifts/n1/leadership", json={"shift_leader": True, "act_up": False})
    bad = client.patch("/api/shifts/n1/leadership", json={"shift_leader": "yes", "act_up": False})

    assert ok.status_code == 200
    assert bad.status_code == 400
    assert rota.calls == [("leadership", "n1", True, False)]


def test_daily_view_reports_refresh_interval(client):
    body = client.get(f"/api/daily?{QUERY}").get_json()
    assert body["auto_refresh_seconds"] == 60


def test_non_string_values_are_rejected(client, rota: InMemoryRota):
    assign = client.post("/api/shifts/s1/assignment", json={"staff_id": 42})
    bad_sublocation = client.post("/api/daily/publish", json={"sublocation_id": 7, "date": "2026-02-10"})
    bad_date = client.post("/api/daily/publish", json={"sublocation_id": "sub-1", "date": 20260210})

    assert assign.status_code == 400
    assert bad_sublocation.status_code == 400
    assert bad_date.status_code == 400
    assert bad_date.get_json()["success"] is False
    assert rota.calls == []
