from __future__ import annotations

from datetime import date

import pytest

from src.class_attendance.class_attendance.core.enums import ServiceType
from src.class_attendance.class_attendance.core.exceptions import ValidationError
from src.class_attendance.class_attendance.recent.service import RecentAttendanceService, build_view, weeks_for_month


@pytest.fixture
def seeded(attendance_repo):
    attendance_repo.add_record(1, date(2024, 1, 7), ServiceType.SUNDAY, present=10)
    attendance_repo.add_record(1, date(2024, 1, 2), ServiceType.BIBLE_STUDY, present=4)
    attendance_repo.add_record(2, date(2024, 1, 7), ServiceType.SUNDAY, present=6)
    attendance_repo.add_record(1, date(2024, 1, 14), ServiceType.SUNDAY, present=8)
    attendance_repo.add_record(1, date(2023, 11, 5), ServiceType.SUNDAY, present=9)
    return attendance_repo


def test_weeks_for_month_buckets_by_iso_week(seeded):
    weeks = weeks_for_month(seeded.list_all(), "2024-01")

    assert [w.week_number for w in weeks] == [1, 2]
    assert weeks[0].label == "Week 1: Jan 1 - Jan 7"
    assert weeks[0].dates == (date(2024, 1, 2), date(2024, 1, 7))


def test_class_view_counts_present_for_filter(seeded):
    view = build_view(seeded.list_all(), class_number=1, service_filter="sunday")

    assert view.years == ["2024", "2023"]
    assert view.selected_month == "2024-01"
    assert view.selected_week == 1
    assert view.count == 10

    total = build_view(seeded.list_all(), class_number=1, service_filter="total")
    assert total.count == 14


def test_admin_view_summarises_per_class(seeded):
    view = RecentAttendanceService(seeded).view(year="2024", month="2024-01", week=1, service_filter="sunday")

    assert view.classes == [1, 2]
    assert view.class_summary == [{"class_number": 1, "count": 10}, {"class_number": 2, "count": 6}]


def test_unknown_selections_fall_back_to_newest(seeded):
    view = build_view(seeded.list_all(), class_number=1, year="1999", month="1999-01", week=40)
    assert view.selected_year == "2024"
    assert view.selected_week == 1


def test_bad_filter_rejected(seeded):
    with pytest.raises(ValidationError):
        build_view(seeded.list_all(), service_filter="weekly")


def test_empty_history(attendance_repo):
    view = build_view([], class_number=1)
    assert view.years == [] and view.weeks == [] and view.count == 0
