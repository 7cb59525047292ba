from __future__ import annotations

from datetime import date

import pytest

from src.class_attendance.class_attendance.core.enums import MemberStatus, ServiceType


@pytest.fixture
def leader_client(client, leaders_repo, members_repo):
    leaders_repo.add(1, "class1", "password123", full_name="John Smith")
    leaders_repo.add(2, "class2", "password456")
    members_repo.add("Anna", 1)
    members_repo.add("Ben", 1)
    res = client.post("/api/login", json={"class_number": "1", "password": "password123"})
    assert res.status_code == 200
    return client


def test_login_failure_returns_401(client, leaders_repo):
    leaders_repo.add(1, "class1", "password123")
    res = client.post("/api/login", json={"class_number": "1", "password": "nope"})
    assert res.status_code == 401
    assert res.get_json() == {"success": False, "message": "Invalid class number or password"}


def test_routes_require_login(client):
    assert client.get("/api/members").status_code == 401
    assert client.get("/api/admin/settings").status_code == 401


def test_session_after_login(leader_client):
    data = leader_client.get("/api/session").get_json()
    assert data["user"]["class_number"] == 1
    assert data["user"]["display_name"] == "John Smith"
    assert data["user"]["is_admin"] is False


def test_leader_is_pinned_to_own_class(leader_client):
    res = leader_client.get("/api/members?class_number=2")
    assert res.status_code == 403

    names = [m["name"] for m in leader_client.get("/api/members").get_json()["members"]]
    assert names == ["Anna", "Ben"]


def test_leader_cannot_open_admin_settings(leader_client):
    assert leader_client.get("/api/admin/settings").status_code == 403


def test_mark_attendance_flow(leader_client, attendance_repo):
    empty = leader_client.post(
        "/api/attendance", json={"date": "2024-01-07", "service_type": "sunday", "statuses": {}}
    )
    assert empty.status_code == 400
    assert attendance_repo.writes == 0

    wrong_day = leader_client.post(
        "/api/attendance", json={"date": "2024-01-08", "service_type": "sunday", "statuses": {"1": "present"}}
    )
    assert wrong_day.status_code == 400

    res = leader_client.post(
        "/api/attendance",
        json={"date": "2024-01-07", "service_type": "sunday", "statuses": {"1": "present", "2": "sick"}, "visitors": 3},
    )
    body = res.get_json()
    assert res.status_code == 200 and body["success"] is True
    assert body["stats"] == {"present": 1, "absent": 0, "sick": 1, "travel": 0, "total": 2}

    record = attendance_repo.get_by_id(body["id"])
    assert record.class_leader_name == "John Smith"

    existing = leader_client.get("/api/attendance/existing?date=2024-01-07&service_type=sunday").get_json()
    assert existing["statuses"] == {"1": "present", "2": "sick"}


def test_edit_record_members(leader_client, attendance_repo):
    rid = attendance_repo.save_marking(
        class_number=1,
        attendance_date=date(2024, 1, 7),
        service_type=ServiceType.SUNDAY,
        statuses={},
    )
    res = leader_client.put(f"/api/attendance/records/{rid}/members", json={"statuses": {"1": "present"}})
    assert res.status_code == 200
    assert res.get_json()["record"]["total_members_present"] == 1

    empty = leader_client.put(f"/api/attendance/records/{rid}/members", json={"statuses": {}})
    assert empty.status_code == 400

    other = attendance_repo.add_record(2, date(2024, 1, 7), ServiceType.SUNDAY)
    res = leader_client.put(f"/api/attendance/records/{other.attendance_id}/members", json={"statuses": {"1": "present"}})
    assert res.status_code == 403

    assert leader_client.get("/api/attendance/records/999/members").status_code == 404


def test_marking_rejects_members_of_other_classes(leader_client, members_repo, attendance_repo):
    outsider = members_repo.add("Cara", 2)
    res = leader_client.post(
        "/api/attendance",
        json={
            "date": "2024-01-07",
            "service_type": "sunday",
            "statuses": {"1": "present", str(outsider.member_id): "present", "999": "present"},
        },
    )
    assert res.status_code == 400
    assert res.get_json()["success"] is False
    assert attendance_repo.writes == 0

    rid = attendance_repo.save_marking(
        class_number=1,
        attendance_date=date(2024, 1, 7),
        service_type=ServiceType.SUNDAY,
        statuses={1: MemberStatus.PRESENT},
    )
    writes = attendance_repo.writes
    for statuses in ({str(outsider.member_id): "absent"}, {"999": "absent"}):
        res = leader_client.put(f"/api/attendance/records/{rid}/members", json={"statuses": statuses})
        assert res.status_code == 400
    assert attendance_repo.writes == writes
    assert attendance_repo.get_by_id(rid).total_present == 1

    note = leader_client.put(f"/api/reports/2024-01/notes/{outsider.member_id}", json={"note": "Moved"})
    assert note.status_code == 400


def test_admin_settings_and_health(client, settings_repo):
    res = client.post("/api/login", json={"class_number": "admin", "password": "ADMIN123"})
    assert res.get_json()["user"]["is_admin"] is True

    res = client.put("/api/admin/settings/thresholds", json={"monthly": 0, "quarterly": 10})
    assert res.status_code == 400

    res = client.put("/api/admin/settings/thresholds", json={"monthly": 3, "quarterly": 9})
    assert res.get_json()["settings"]["monthly_absence_threshold"] == 3

    # the admin must name a class for class-scoped screens
    assert client.get("/api/members").status_code == 400
    assert client.get("/api/members?class_number=1").status_code == 200

    assert client.get("/api/health").status_code == 200
    settings_repo.reachable = False
    assert client.get("/api/health").status_code == 503


def test_unexpected_errors_are_reported_generically(leader_client, members_repo, monkeypatch):
    def boom(class_number):
        raise RuntimeError("db exploded")

    monkeypatch.setattr(members_repo, "list_for_class", boom)
    res = leader_client.get("/api/members")
    assert res.status_code == 500
    assert res.get_json() == {"success": False, "message": "Unexpected server error"}


def test_confirm_quarterly_report(leader_client, settings_repo, attendance_repo):
    from src.class_attendance.class_attendance.settings.model import AppSettings

    settings_repo.settings = AppSettings(minister_emails="pastor@church.org")
    attendance_repo.add_record(1, date(2024, 2, 4), ServiceType.SUNDAY, present=5)

    res = leader_client.post("/api/reports/2024-Q1/confirm", json={})
    body = res.get_json()
    assert res.status_code == 200
    assert body["status"]["status"] == "submitted"
    assert body["mailto"].startswith("mailto:pastor@church.org?subject=Quarterly%20Attendance%20Report")

    status = leader_client.get("/api/reports/2024-Q1/status").get_json()
    assert status["status"]["period_key"] == "2024-Q1"

    assert leader_client.get("/api/reports/2024-13").status_code == 400
