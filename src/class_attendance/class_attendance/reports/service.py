from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import replace
from datetime import date
from typing import Any, Iterable, Optional, Sequence
from urllib.parse import quote

from ..attendance.model import AttendanceRecord, MemberAttendance
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_non_negative_int
from ..core.enums import MemberStatus, ReportType
from ..core.exceptions import NotFoundError, ValidationError
from ..members.repository import MemberRepository
from ..settings.model import AppSettings
from .model import ClassReportStatus, ManualReport, Period
from .repository import ReportRepository

logger = logging.getLogger(__name__)

ABSENCE_TYPES = (MemberStatus.ABSENT, MemberStatus.SICK, MemberStatus.TRAVEL)

# Characters encodeURIComponent leaves alone.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def period_totals(rows: Iterable[AttendanceRecord]) -> dict:
    totals = {"present": 0, "absent": 0, "visitors": 0, "records": 0}
    for r in rows:
        totals["present"] += r.total_present
        totals["absent"] += r.total_absent
        totals["visitors"] += r.total_visitors
        totals["records"] += 1
    return totals


def trend_series(rows: Iterable[AttendanceRecord]) -> list[dict]:
    return [
        {"date": r.attendance_date.isoformat(), "present": r.total_present, "absent": r.total_absent}
        for r in sorted(rows, key=lambda r: r.attendance_date)
    ]


def monthly_breakdown(rows: Iterable[AttendanceRecord]) -> list[dict]:
    by_month: dict[str, dict] = {}
    for r in rows:
        month = r.attendance_date.strftime("%Y-%m")
        bucket = by_month.setdefault(month, {"present": 0, "absent": 0, "visitors": 0, "count": 0})
        bucket["present"] += r.total_present
        bucket["absent"] += r.total_absent
        bucket["visitors"] += r.total_visitors
        bucket["count"] += 1
    return [{"month": m, **by_month[m]} for m in sorted(by_month)]


def quarterly_mailto(emails: Sequence[str], *, class_number: int, period_key: str, record_count: int) -> str:
    subject = f"Quarterly Attendance Report - Class {class_number} ({period_key})"
    body = (
        f"Quarterly report for Class {class_number} has been confirmed.\n\n"
        f"Period: {period_key}\nAttendance Records: {record_count}"
    )
    return (
        f"mailto:{','.join(emails)}"
        f"?subject={quote(subject, safe=_URI_COMPONENT_SAFE)}"
        f"&body={quote(body, safe=_URI_COMPONENT_SAFE)}"
    )


def count_statuses(rows: Iterable[MemberAttendance]) -> dict[int, dict[MemberStatus, int]]:
    """Per member: how many times each status was recorded."""
    counts: dict[int, dict[MemberStatus, int]] = defaultdict(lambda: defaultdict(int))
    for row in rows:
        counts[row.member_id][row.status] += 1
    return counts


def parse_absence_types(values: Iterable[Any]) -> tuple[MemberStatus, ...]:
    out: list[MemberStatus] = []
    for v in values or ():
        try:
            status = MemberStatus(str(v).strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown absence type: {v!r}")
        if status not in ABSENCE_TYPES:
            raise ValidationError(f"Unknown absence type: {v!r}")
        if status not in out:
            out.append(status)
    if not out:
        raise ValidationError("Please select at least one absence type")
    return tuple(out)


class ReportService:
    """Use cases behind the monthly, quarterly and manual report tabs."""

    def __init__(self, reports: ReportRepository, attendance: AttendanceRepository, members: MemberRepository):
        self._reports = reports
        self._attendance = attendance
        self._members = members

    def _rows(self, class_number: int, period: Period) -> Sequence[AttendanceRecord]:
        return self._attendance.list_range(
            class_number=int(class_number), start_date=period.start_date, end_date=period.end_date
        )

    def load_period(self, *, class_number: int, period_key: str) -> dict:
        period = Period.parse(period_key)
        rows = self._rows(class_number, period)
        data = {
            "period": period.to_dict(),
            "records": [r.to_dict() for r in rows],
            "totals": period_totals(rows),
            "trend": trend_series(rows),
            "monthly": monthly_breakdown(rows),
            "read_only": period.is_quarterly,
            "notes": {str(k): v for k, v in self.list_notes(class_number=class_number, period_key=period.key).items()},
        }
        if period.is_quarterly:
            status = self.get_report_status(class_number=class_number, period_key=period.key)
            data["status"] = status.to_dict() if status else None
        return data

    def update_row_totals(
        self, *, class_number: int, period_key: str, record_id: int, present: Any, absent: Any, visitors: Any
    ) -> AttendanceRecord:
        period = Period.parse(period_key)
        if period.is_quarterly:
            raise ValidationError("Quarterly reports are read-only")

        present = require_non_negative_int(present, "Present")
        absent = require_non_negative_int(absent, "Absent")
        visitors = require_non_negative_int(visitors, "Visitors")

        record = self._attendance.get_by_id(int(record_id))
        if not record or record.class_number != int(class_number):
            raise NotFoundError("Attendance record not found")
        if not period.start_date <= record.attendance_date <= period.end_date:
            raise ValidationError(f"Attendance record is outside {period.key}")

        self._attendance.update_totals(attendance_id=record.attendance_id, present=present, absent=absent, visitors=visitors)
        logger.info("Report totals updated for record %s (class %s)", record.attendance_id, class_number)
        return self._attendance.get_by_id(record.attendance_id) or record

    def generate_quarterly_summary(self, *, class_number: int, period_key: str) -> dict:
        period = Period.parse(period_key)
        if not period.is_quarterly:
            raise ValidationError("Quarterly summaries need a YYYY-Qn period")

        rows = self._rows(class_number, period)
        if not rows:
            raise ValidationError("No attendance records to generate a quarterly report.")

        totals = period_totals(rows)
        return {
            "period_key": period.key,
            "date_range": {"start": period.start_date.isoformat(), "end": period.end_date.isoformat()},
            "totals": {k: totals[k] for k in ("present", "absent", "visitors")},
            "records": [r.to_dict() for r in rows],
            "generated_at": now_local().isoformat(),
        }

    def get_report_status(self, *, class_number: int, period_key: str) -> Optional[ClassReportStatus]:
        return self._reports.get_status(
            class_number=int(class_number), report_type=ReportType.QUARTERLY, period_key=period_key
        )

    def confirm_quarterly(
        self, *, class_number: int, period_key: str, settings: AppSettings
    ) -> tuple[ClassReportStatus, Optional[str]]:
        """Mark the quarter as submitted; returns the status and a mailto link when ministers are configured."""
        period = Period.parse(period_key)
        if not period.is_quarterly:
            raise ValidationError("Only quarterly reports can be confirmed")

        status = self._reports.mark_submitted(
            class_number=int(class_number),
            report_type=ReportType.QUARTERLY,
            period_key=period.key,
            submitted_at=now_local(),
        )
        logger.info("Quarterly report %s confirmed for class %s", period.key, class_number)

        emails = settings.minister_email_list()
        if not emails:
            return status, None
        record_count = len(self._rows(class_number, period))
        return status, quarterly_mailto(emails, class_number=int(class_number), period_key=period.key, record_count=record_count)

    # --- notes ---

    def list_notes(self, *, class_number: int, period_key: str) -> dict[int, str]:
        period = Period.parse(period_key)
        notes = self._reports.list_notes(
            class_number=int(class_number), report_type=period.report_type, period_key=period.key
        )
        return {n.member_id: n.note for n in notes}

    def save_note(self, *, class_number: int, period_key: str, member_id: int, note: Optional[str]) -> None:
        period = Period.parse(period_key)
        text = (note or "").strip()
        keys = dict(
            class_number=int(class_number),
            member_id=int(member_id),
            report_type=period.report_type,
            period_key=period.key,
        )
        if text:
            class_ids = {m.member_id for m in self._members.list_for_class(int(class_number))}
            if int(member_id) not in class_ids:
                raise ValidationError(f"Member {member_id} is not in class {class_number}")
            self._reports.upsert_note(note=text, **keys)
        else:
            self._reports.delete_note(**keys)

    # --- absence flags ---

    def absence_flags(self, *, class_number: int, period_key: str, settings: AppSettings) -> list[dict]:
        period = Period.parse(period_key)
        threshold = settings.threshold_for(period.report_type)
        counts = count_statuses(
            self._attendance.list_member_statuses_in_range(
                class_number=int(class_number), start_date=period.start_date, end_date=period.end_date
            )
        )

        out = []
        for m in self._members.list_for_class(int(class_number)):
            absences = counts.get(m.member_id, {}).get(MemberStatus.ABSENT, 0)
            out.append(
                {
                    "member_id": m.member_id,
                    "name": m.name,
                    "absences": absences,
                    "threshold": threshold,
                    "flagged": absences >= threshold,
                }
            )
        return out

    # --- manual reports ---

    def generate_manual_report(
        self, *, class_number: int, start_date: date, end_date: date, absence_types: Iterable[Any]
    ) -> ManualReport:
        if start_date > end_date:
            raise ValidationError("Start date must be before end date")
        types = parse_absence_types(absence_types)

        counts = count_statuses(
            self._attendance.list_member_statuses_in_range(
                class_number=int(class_number), start_date=start_date, end_date=end_date
            )
        )

        data = {}
        for m in self._members.list_for_class(int(class_number)):
            member_counts = counts.get(m.member_id, {})
            entry = {"name": m.name}
            for status in ABSENCE_TYPES:
                entry[f"{status.value}_count"] = member_counts.get(status, 0) if status in types else 0
            entry["total_absences"] = sum(entry[f"{t.value}_count"] for t in types)
            data[str(m.member_id)] = entry

        report = ManualReport(
            report_id=None,
            class_number=int(class_number),
            report_date=now_local(),
            date_range_start=start_date,
            date_range_end=end_date,
            absence_types=types,
            report_data=data,
        )
        report_id = self._reports.save_manual_report(report)
        logger.info("Manual report %s archived for class %s (%s..%s)", report_id, class_number, start_date, end_date)
        return replace(report, report_id=report_id)

    def list_manual_reports(self, class_number: int) -> Sequence[ManualReport]:
        return self._reports.list_manual_reports(int(class_number))

    def delete_manual_report(self, *, class_number: int, report_id: int) -> None:
        if not self._reports.delete_manual_report(class_number=int(class_number), report_id=int(report_id)):
            raise NotFoundError("Manual report not found")
        logger.info("Manual report %s deleted", report_id)
