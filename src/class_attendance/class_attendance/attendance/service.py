from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..core.constants import DEFAULT_SAVE_TIMEOUT_SECONDS
from ..core.enums import MemberStatus, ServiceType
from ..core.exceptions import NotFoundError, ValidationError
from ..common.validators import require_non_negative_int
from ..members.repository import MemberRepository
from .model import AttendanceRecord, MemberAttendance, StatusTally
from .records import AttendanceEditSession, group_by_year_month, summarize
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

# date.weekday(): Monday=0 ... Sunday=6
_SERVICE_WEEKDAY = {
    ServiceType.SUNDAY: (6, "Sunday"),
    ServiceType.BIBLE_STUDY: (1, "Tuesday"),
}


def parse_service_type(value: Any) -> ServiceType:
    try:
        return ServiceType(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError("Service type must be 'sunday' or 'bible-study'")


def parse_status(value: Any) -> MemberStatus:
    try:
        return MemberStatus(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown attendance status: {value!r}")


def parse_status_map(raw: Mapping[Any, Any]) -> dict[int, MemberStatus]:
    """{member_id: status} from JSON-ish input (string keys, mixed-case values)."""
    out: dict[int, MemberStatus] = {}
    for member_id, status in (raw or {}).items():
        try:
            key = int(member_id)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid member id: {member_id!r}")
        out[key] = parse_status(status)
    return out


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        members: MemberRepository,
        *,
        save_timeout_seconds: float = DEFAULT_SAVE_TIMEOUT_SECONDS,
    ):
        self._attendance = attendance
        self._members = members
        self._save_timeout_seconds = float(save_timeout_seconds)

    @staticmethod
    def validate_service_day(attendance_date: date, service_type: ServiceType) -> None:
        weekday, day_name = _SERVICE_WEEKDAY[service_type]
        if attendance_date.weekday() != weekday:
            raise ValidationError(
                f"{service_type.label} must be recorded on a {day_name}; "
                f"{attendance_date.strftime('%Y-%m-%d')} is a {attendance_date.strftime('%A')}"
            )

    def check_members(self, class_number: int, member_ids: Iterable[int]) -> None:
        """Every id must be a member of ``class_number``."""
        known = {m.member_id for m in self._members.list_for_class(int(class_number))}
        unknown = sorted({int(i) for i in member_ids} - known)
        if unknown:
            raise ValidationError(
                f"Not members of class {int(class_number)}: {', '.join(str(i) for i in unknown)}"
            )

    @staticmethod
    def stats(statuses: Mapping[int, MemberStatus]) -> StatusTally:
        return StatusTally.of(statuses.values())

    def get_existing(
        self, *, class_number: int, attendance_date: date, service_type: ServiceType
    ) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_class_date_service(
            class_number=int(class_number), attendance_date=attendance_date, service_type=service_type
        )

    def mark_attendance(
        self,
        *,
        class_number: int,
        attendance_date: date,
        service_type: ServiceType,
        statuses: Mapping[int, MemberStatus],
        class_leader_name: Optional[str] = None,
        visitors: Optional[int] = None,
    ) -> int:
        if not statuses:
            raise ValidationError("Mark at least one member's attendance")
        self.validate_service_day(attendance_date, service_type)
        self.check_members(class_number, statuses)
        if visitors is not None:
            visitors = require_non_negative_int(visitors, "Visitors")

        attendance_id = self._attendance.save_marking(
            class_number=int(class_number),
            attendance_date=attendance_date,
            service_type=service_type,
            statuses=dict(statuses),
            class_leader_name=class_leader_name or f"Class {int(class_number)} Leader",
            visitors=visitors,
        )
        logger.info(
            "Attendance %s saved for class %s on %s (%s, %d members)",
            attendance_id,
            class_number,
            attendance_date,
            service_type.value,
            len(statuses),
        )
        return attendance_id

    def load_records(self, class_number: int) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_class(int(class_number))

    def records_overview(self, class_number: int) -> dict:
        records = self.load_records(class_number)
        grouped = group_by_year_month(records)
        return {
            "summary": summarize(records),
            "years": [
                {
                    "year": year,
                    "count": sum(len(items) for items in months.values()),
                    "months": [
                        {"month": month, "count": len(items), "records": [r.to_dict() for r in items]}
                        for month, items in months.items()
                    ],
                }
                for year, months in grouped.items()
            ],
        }

    def get_record(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    def member_statuses(self, attendance_id: int) -> Sequence[MemberAttendance]:
        return self._attendance.list_member_statuses(int(attendance_id))

    def edit_session(self) -> AttendanceEditSession:
        return AttendanceEditSession(self._attendance, timeout_seconds=self._save_timeout_seconds)

    def edit_record(self, attendance_id: int, statuses: Mapping[int, MemberStatus]) -> AttendanceRecord:
        """Apply re-marked statuses to a saved record through an edit session."""
        if not statuses:
            raise ValidationError("No members marked. Please mark at least one member before saving.")
        record = self.get_record(attendance_id)
        self.check_members(record.class_number, statuses)

        editor = self.edit_session()
        editor.begin_edit(record.attendance_id)
        for member_id, status in statuses.items():
            editor.set_status(member_id, status)
        return editor.save()
