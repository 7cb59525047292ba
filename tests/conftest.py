from __future__ import annotations

from dataclasses import replace
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.class_attendance.class_attendance.attendance.model import AttendanceRecord, MemberAttendance, StatusTally
from src.class_attendance.class_attendance.container import wire
from src.class_attendance.class_attendance.core.enums import MemberStatus, ReportStatus
from src.class_attendance.class_attendance.core.exceptions import NotFoundError
from src.class_attendance.class_attendance.leaders.model import ClassLeader
from src.class_attendance.class_attendance.members.model import Member
from src.class_attendance.class_attendance.reports.model import ClassReportStatus, ReportMemberNote
from src.class_attendance.class_attendance.settings.model import AppSettings


class InMemoryMembers:
    def __init__(self):
        self._next_id = 1
        self.members: dict[int, Member] = {}

    def add(self, name: str, class_number: int, **kwargs) -> Member:
        member = Member(member_id=None, name=name, class_number=class_number, **kwargs)
        return self.members[self.create(member)]

    def list_for_class(self, class_number):
        return sorted((m for m in self.members.values() if m.class_number == class_number), key=lambda m: m.name)

    def get_by_id(self, member_id):
        return self.members.get(member_id)

    def create(self, member):
        mid = self._next_id
        self._next_id += 1
        self.members[mid] = replace(member, member_id=mid)
        return mid

    def update(self, member):
        if member.member_id not in self.members:
            return False
        self.members[member.member_id] = member
        return True

    def delete_by_id(self, member_id):
        return self.members.pop(member_id, None) is not None

    def count_all(self):
        return len(self.members)

    def count_classes(self):
        return len({m.class_number for m in self.members.values()})


class InMemoryAttendance:
    """Keeps member rows per record and recomputes the summary from all of them, like the MySQL repo."""

    def __init__(self):
        self._next_id = 1
        self.records: dict[int, AttendanceRecord] = {}
        self.member_rows: dict[int, dict[int, MemberStatus]] = {}
        self.writes = 0

    def add_record(self, class_number, attendance_date, service_type, *, present=0, absent=0, visitors=0):
        rid = self._next_id
        self._next_id += 1
        self.records[rid] = AttendanceRecord(
            attendance_id=rid,
            class_number=class_number,
            attendance_date=attendance_date,
            service_type=service_type,
            total_present=present,
            total_absent=absent,
            total_visitors=visitors,
        )
        self.member_rows[rid] = {}
        return self.records[rid]

    def _recompute(self, rid):
        tally = StatusTally.of(self.member_rows[rid].values())
        self.records[rid] = replace(
            self.records[rid],
            total_present=tally.present,
            total_absent=tally.absent,
            total_sick=tally.sick,
            total_travel=tally.travel,
        )

    def list_for_class(self, class_number):
        rows = [r for r in self.records.values() if r.class_number == class_number]
        return sorted(rows, key=lambda r: r.attendance_date, reverse=True)

    def list_all(self):
        return list(self.records.values())

    def list_range(self, *, class_number, start_date, end_date):
        rows = [
            r
            for r in self.records.values()
            if r.class_number == class_number and start_date <= r.attendance_date <= end_date
        ]
        return sorted(rows, key=lambda r: r.attendance_date)

    def get_by_id(self, attendance_id):
        return self.records.get(attendance_id)

    def get_for_class_date_service(self, *, class_number, attendance_date, service_type):
        for r in self.records.values():
            if (r.class_number, r.attendance_date, r.service_type) == (class_number, attendance_date, service_type):
                return r
        return None

    def save_marking(
        self, *, class_number, attendance_date, service_type, statuses, class_leader_name=None, visitors=None
    ):
        self.writes += 1
        existing = self.get_for_class_date_service(
            class_number=class_number, attendance_date=attendance_date, service_type=service_type
        )
        record = existing or self.add_record(class_number, attendance_date, service_type)
        record = replace(record, class_leader_name=class_leader_name)
        if visitors is not None:
            record = replace(record, total_visitors=visitors)
        self.records[record.attendance_id] = record
        self.member_rows[record.attendance_id].update(statuses)
        self._recompute(record.attendance_id)
        return record.attendance_id

    def list_member_statuses(self, attendance_id):
        record = self.records.get(attendance_id)
        if not record:
            return []
        return [
            MemberAttendance(attendance_id, mid, record.class_number, status, record.attendance_date)
            for mid, status in sorted(self.member_rows[attendance_id].items())
        ]

    def replace_member_statuses(self, attendance_id, statuses):
        if attendance_id not in self.records:
            raise NotFoundError("Attendance record not found")
        self.writes += 1
        self.member_rows[attendance_id].update(statuses)
        self._recompute(attendance_id)
        return self.records[attendance_id]

    def update_totals(self, *, attendance_id, present, absent, visitors):
        if attendance_id not in self.records:
            return False
        self.records[attendance_id] = replace(
            self.records[attendance_id], total_present=present, total_absent=absent, total_visitors=visitors
        )
        return True

    def list_member_statuses_in_range(self, *, class_number, start_date, end_date):
        out = []
        for r in self.list_range(class_number=class_number, start_date=start_date, end_date=end_date):
            out.extend(self.list_member_statuses(r.attendance_id))
        return out

    def count_since(self, since):
        return sum(1 for r in self.records.values() if r.attendance_date >= since)


class InMemoryLeaders:
    def __init__(self):
        self._next_id = 1
        self.leaders: dict[int, ClassLeader] = {}

    def add(self, class_number: Optional[int], username: str, password: str, *, full_name=None, active=True):
        lid = self.create(
            username=username,
            password_hash=generate_password_hash(password),
            class_number=class_number,
            full_name=full_name,
            email=None,
            phone=None,
        )
        if not active:
            self.leaders[lid] = replace(self.leaders[lid], active=False)
        return self.leaders[lid]

    def get_by_id(self, leader_id):
        return self.leaders.get(leader_id)

    def get_by_class(self, class_number):
        return next((l for l in self.leaders.values() if l.class_number == class_number), None)

    def get_by_username(self, username):
        return next((l for l in self.leaders.values() if l.username == username), None)

    def list_all(self):
        return sorted(self.leaders.values(), key=lambda l: l.username)

    def create(self, *, username, password_hash, class_number, full_name, email, phone, created_by=None):
        lid = self._next_id
        self._next_id += 1
        self.leaders[lid] = ClassLeader(
            leader_id=lid,
            username=username,
            password_hash=password_hash,
            class_number=class_number,
            full_name=full_name,
            email=email,
            phone=phone,
            created_by=created_by,
        )
        return lid

    def update(self, leader_id, *, updated_by=None, **fields):
        if leader_id not in self.leaders:
            return False
        self.leaders[leader_id] = replace(self.leaders[leader_id], updated_by=updated_by, **fields)
        return True

    def delete_by_id(self, leader_id):
        return self.leaders.pop(leader_id, None) is not None


class InMemorySettings:
    def __init__(self, settings: Optional[AppSettings] = None):
        self.settings = settings
        self.reachable = True

    def get(self):
        return self.settings

    def update(self, **fields):
        self.settings = replace(self.settings or AppSettings(), **fields)

    def ping(self):
        return self.reachable


class InMemoryReports:
    def __init__(self):
        self.notes: dict[tuple, str] = {}
        self.statuses: dict[tuple, ClassReportStatus] = {}
        self.manual: dict[int, object] = {}
        self._next_id = 1

    def list_notes(self, *, class_number, report_type, period_key):
        return [
            ReportMemberNote(c, member_id, t, p, note)
            for (c, member_id, t, p), note in self.notes.items()
            if (c, t, p) == (class_number, report_type, period_key)
        ]

    def upsert_note(self, *, class_number, member_id, report_type, period_key, note):
        self.notes[(class_number, member_id, report_type, period_key)] = note

    def delete_note(self, *, class_number, member_id, report_type, period_key):
        return self.notes.pop((class_number, member_id, report_type, period_key), None) is not None

    def get_status(self, *, class_number, report_type, period_key):
        return self.statuses.get((class_number, report_type, period_key))

    def mark_submitted(self, *, class_number, report_type, period_key, submitted_at):
        status = ClassReportStatus(class_number, report_type, period_key, ReportStatus.SUBMITTED, submitted_at)
        self.statuses[(class_number, report_type, period_key)] = status
        return status

    def save_manual_report(self, report):
        rid = self._next_id
        self._next_id += 1
        self.manual[rid] = replace(report, report_id=rid)
        return rid

    def list_manual_reports(self, class_number):
        rows = [r for r in self.manual.values() if r.class_number == class_number]
        return sorted(rows, key=lambda r: (r.report_date, r.report_id), reverse=True)

    def delete_manual_report(self, *, class_number, report_id):
        report = self.manual.get(report_id)
        if not report or report.class_number != class_number:
            return False
        del self.manual[report_id]
        return True


@pytest.fixture
def members_repo():
    return InMemoryMembers()


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture
def leaders_repo():
    return InMemoryLeaders()


@pytest.fixture
def settings_repo():
    return InMemorySettings()


@pytest.fixture
def reports_repo():
    return InMemoryReports()


@pytest.fixture
def container(members_repo, attendance_repo, leaders_repo, settings_repo, reports_repo):
    return wire(
        members_repo=members_repo,
        attendance_repo=attendance_repo,
        leaders_repo=leaders_repo,
        settings_repo=settings_repo,
        reports_repo=reports_repo,
        admin_code="admin123",
        save_timeout_seconds=2,
    )


@pytest.fixture
def client(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.class_attendance.class_attendance.main import create_app

    app = create_app(container)
    return app.test_client()

