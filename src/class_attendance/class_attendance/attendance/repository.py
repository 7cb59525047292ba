from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import MemberStatus, ServiceType
from .model import AttendanceRecord, MemberAttendance


class AttendanceRepository(Protocol):
    def list_for_class(self, class_number: int) -> Sequence[AttendanceRecord]:
        """All records of a class, newest date first."""
        raise NotImplementedError

    def list_all(self) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_range(self, *, class_number: int, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_class_date_service(
        self, *, class_number: int, attendance_date: date, service_type: ServiceType
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def save_marking(
        self,
        *,
        class_number: int,
        attendance_date: date,
        service_type: ServiceType,
        statuses: Mapping[int, MemberStatus],
        class_leader_name: Optional[str] = None,
        visitors: Optional[int] = None,
    ) -> int:
        """Upsert the summary row and member rows in one transaction; returns the record id."""
        raise NotImplementedError

    def list_member_statuses(self, attendance_id: int) -> Sequence[MemberAttendance]:
        raise NotImplementedError

    def replace_member_statuses(self, attendance_id: int, statuses: Mapping[int, MemberStatus]) -> AttendanceRecord:
        """Upsert the given statuses and recompute the summary from all member rows, atomically."""
        raise NotImplementedError

    def update_totals(self, *, attendance_id: int, present: int, absent: int, visitors: int) -> bool:
        raise NotImplementedError

    def list_member_statuses_in_range(
        self, *, class_number: int, start_date: date, end_date: date
    ) -> Sequence[MemberAttendance]:
        raise NotImplementedError

    def count_since(self, since: date) -> int:
        raise NotImplementedError
