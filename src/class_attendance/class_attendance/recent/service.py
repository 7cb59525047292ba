from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import short_label, week_number, week_range
from ..core.enums import ServiceType
from ..core.exceptions import ValidationError
from .model import RecentView, Week

SERVICE_FILTERS = {ServiceType.SUNDAY.value, ServiceType.BIBLE_STUDY.value, "total"}


def weeks_for_month(records: Iterable[AttendanceRecord], year_month: str) -> list[Week]:
    """Bucket the distinct attendance dates of ``year_month`` into ISO weeks, ascending."""
    dates = sorted({r.attendance_date for r in records if r.attendance_date.strftime("%Y-%m") == year_month})
    buckets: dict[int, list] = {}
    for d in dates:
        buckets.setdefault(week_number(d), []).append(d)

    weeks = []
    for number, week_dates in buckets.items():
        start, end = week_range(week_dates[0])
        weeks.append(
            Week(
                week_number=number,
                label=f"Week {number}: {short_label(start)} - {short_label(end)}",
                start_date=start,
                end_date=end,
                dates=tuple(week_dates),
            )
        )
    weeks.sort(key=lambda w: w.start_date)
    return weeks


def _matching(records: Iterable[AttendanceRecord], week: Week, service_filter: str) -> list[AttendanceRecord]:
    dates = set(week.dates)
    return [
        r
        for r in records
        if r.attendance_date in dates and (service_filter == "total" or r.service_type.value == service_filter)
    ]


def count_for_week(records: Iterable[AttendanceRecord], week: Week, service_filter: str) -> int:
    return sum(r.total_present for r in _matching(records, week, service_filter))


def class_summary_for_week(records: Iterable[AttendanceRecord], week: Week, service_filter: str) -> list[dict]:
    totals: dict[int, int] = {}
    for r in _matching(records, week, service_filter):
        totals[r.class_number] = totals.get(r.class_number, 0) + r.total_present
    return [{"class_number": c, "count": totals[c]} for c in sorted(totals)]


def build_view(
    records: Sequence[AttendanceRecord],
    *,
    class_number: Optional[int] = None,
    year: Optional[str] = None,
    month: Optional[str] = None,
    week: Optional[int] = None,
    service_filter: str = ServiceType.BIBLE_STUDY.value,
) -> RecentView:
    """Compute the recent-attendance view.

    With ``class_number`` the view reports one count for that class; without
    it (admin view) it reports present totals per class. Year and month default
    to the newest available, and the week defaults to the first of the month.
    Service type only filters the counts, never the available years/months/weeks.
    """
    if service_filter not in SERVICE_FILTERS:
        raise ValidationError("Filter must be 'sunday', 'bible-study' or 'total'")

    classes = sorted({r.class_number for r in records})
    scoped = [r for r in records if class_number is None or r.class_number == class_number]

    years = sorted({str(r.attendance_date.year) for r in scoped}, reverse=True)
    selected_year = year if year in years else (years[0] if years else None)
    in_year = [r for r in scoped if str(r.attendance_date.year) == selected_year]

    months = sorted({r.attendance_date.strftime("%Y-%m") for r in in_year}, reverse=True)
    selected_month = month if month in months else (months[0] if months else None)

    weeks = weeks_for_month(in_year, selected_month) if selected_month else []
    by_number = {w.week_number: w for w in weeks}
    selected = by_number.get(week) if week is not None else None
    if selected is None and weeks:
        selected = weeks[0]

    count = 0
    summary: list[dict] = []
    if selected is not None:
        if class_number is None:
            summary = class_summary_for_week(scoped, selected, service_filter)
        else:
            count = count_for_week(scoped, selected, service_filter)

    return RecentView(
        classes=classes,
        years=years,
        months=months,
        selected_year=selected_year,
        selected_month=selected_month,
        weeks=weeks,
        selected_week=selected.week_number if selected else None,
        service_filter=service_filter,
        count=count,
        class_summary=summary,
    )


class RecentAttendanceService:
    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def view(
        self,
        *,
        class_number: Optional[int] = None,
        year: Optional[str] = None,
        month: Optional[str] = None,
        week: Optional[int] = None,
        service_filter: str = ServiceType.BIBLE_STUDY.value,
    ) -> RecentView:
        return build_view(
            self._attendance.list_all(),
            class_number=class_number,
            year=year,
            month=month,
            week=week,
            service_filter=service_filter,
        )
