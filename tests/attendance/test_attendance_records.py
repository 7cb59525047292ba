from __future__ import annotations

import threading
from datetime import date

import pytest

from src.class_attendance.class_attendance.attendance.records import (
    AttendanceEditSession,
    group_by_year_month,
    run_with_timeout,
)
from src.class_attendance.class_attendance.attendance.service import AttendanceService
from src.class_attendance.class_attendance.core.enums import MemberStatus, ServiceType
from src.class_attendance.class_attendance.core.exceptions import NotFoundError, SaveTimeoutError, ValidationError


def _seed_marked(attendance_repo, members_repo):
    for name in ("Anna", "Ben", "Cara", "Dan"):
        members_repo.add(name, 1)
    svc = AttendanceService(attendance_repo, members_repo)
    rid = svc.mark_attendance(
        class_number=1,
        attendance_date=date(2024, 1, 7),
        service_type=ServiceType.SUNDAY,
        statuses={1: MemberStatus.PRESENT, 2: MemberStatus.PRESENT, 3: MemberStatus.ABSENT, 4: MemberStatus.SICK},
    )
    return svc, rid


def test_grouping_buckets_sum_to_record_count(attendance_repo):
    dates = [date(2023, 12, 31), date(2024, 1, 7), date(2024, 1, 9), date(2024, 2, 4), date(2024, 2, 6)]
    for d in dates:
        attendance_repo.add_record(1, d, ServiceType.SUNDAY)

    grouped = group_by_year_month(attendance_repo.list_all())

    assert list(grouped) == [2024, 2023]
    assert list(grouped[2024]) == [2, 1]
    assert sum(len(items) for months in grouped.values() for items in months.values()) == len(dates)
    assert grouped[2024][1][0].attendance_date == date(2024, 1, 9)


def test_records_overview_counts(attendance_repo, members_repo):
    attendance_repo.add_record(2, date(2024, 1, 7), ServiceType.SUNDAY, present=5)
    attendance_repo.add_record(2, date(2024, 1, 9), ServiceType.BIBLE_STUDY, present=3)
    attendance_repo.add_record(9, date(2024, 1, 9), ServiceType.BIBLE_STUDY, present=7)

    overview = AttendanceService(attendance_repo, members_repo).records_overview(2)

    assert overview["summary"] == {"records": 2, "sunday": 1, "bible_study": 1, "total_present": 8}
    assert overview["years"][0]["year"] == 2024
    assert overview["years"][0]["count"] == 2
    assert overview["years"][0]["months"][0]["month"] == 1


def test_editing_subset_keeps_other_members_in_totals(attendance_repo, members_repo):
    svc, rid = _seed_marked(attendance_repo, members_repo)

    editor = svc.edit_session()
    assert editor.begin_edit(rid)[3] == MemberStatus.ABSENT
    editor.set_status(3, MemberStatus.PRESENT)
    record = editor.save()

    assert (record.total_present, record.total_absent, record.total_sick) == (3, 0, 1)
    assert editor.record_id is None


def test_edit_session_saves_only_through_save(attendance_repo, members_repo):
    svc, rid = _seed_marked(attendance_repo, members_repo)
    writes = attendance_repo.writes

    editor = svc.edit_session()
    editor.begin_edit(rid)
    editor.set_status(1, MemberStatus.TRAVEL)
    editor.cancel()

    assert attendance_repo.writes == writes
    assert editor.status_for(1) == MemberStatus.ABSENT
    with pytest.raises(ValidationError):
        editor.set_status(1, MemberStatus.PRESENT)
    with pytest.raises(ValidationError):
        editor.save()


def test_edit_session_rejects_empty_map(attendance_repo):
    record = attendance_repo.add_record(1, date(2024, 1, 7), ServiceType.SUNDAY)
    editor = AttendanceEditSession(attendance_repo)
    editor.begin_edit(record.attendance_id)

    with pytest.raises(ValidationError) as e:
        editor.save()
    assert "No members marked" in str(e.value)
    assert attendance_repo.writes == 0


def test_edit_missing_record_raises(attendance_repo):
    editor = AttendanceEditSession(attendance_repo)
    editor.begin_edit(42)
    editor.set_status(1, MemberStatus.PRESENT)
    with pytest.raises(NotFoundError):
        editor.save()
    assert editor.saving is False


def test_edit_record_applies_statuses(attendance_repo, members_repo):
    svc, rid = _seed_marked(attendance_repo, members_repo)

    record = svc.edit_record(rid, {4: MemberStatus.PRESENT})

    assert (record.total_present, record.total_absent, record.total_sick) == (3, 1, 0)


def test_edit_record_rejects_members_outside_the_class(attendance_repo, members_repo):
    svc, rid = _seed_marked(attendance_repo, members_repo)
    outsider = members_repo.add("Eve", 2)
    writes = attendance_repo.writes

    with pytest.raises(ValidationError):
        svc.edit_record(rid, {1: MemberStatus.ABSENT, outsider.member_id: MemberStatus.PRESENT})
    with pytest.raises(ValidationError):
        svc.edit_record(rid, {999: MemberStatus.PRESENT})

    assert attendance_repo.writes == writes
    assert attendance_repo.member_rows[rid][1] == MemberStatus.PRESENT


def test_get_record_missing(attendance_repo, members_repo):
    with pytest.raises(NotFoundError):
        AttendanceService(attendance_repo, members_repo).get_record(7)


def test_run_with_timeout_raises_and_lets_call_finish():
    release = threading.Event()
    finished = threading.Event()

    def slow():
        release.wait(5)
        finished.set()
        return "done"

    with pytest.raises(SaveTimeoutError):
        run_with_timeout(slow, 0.05)

    release.set()
    assert finished.wait(5)


def test_run_with_timeout_returns_value():
    assert run_with_timeout(lambda: 41 + 1, 1) == 42
