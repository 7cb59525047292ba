from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from ..core.enums import MemberStatus, ServiceType


@dataclass(frozen=True)
class StatusTally:
    present: int = 0
    absent: int = 0
    sick: int = 0
    travel: int = 0

    @classmethod
    def of(cls, statuses: Iterable[MemberStatus]) -> "StatusTally":
        counts = Counter(MemberStatus(s) for s in statuses)
        return cls(
            present=counts[MemberStatus.PRESENT],
            absent=counts[MemberStatus.ABSENT],
            sick=counts[MemberStatus.SICK],
            travel=counts[MemberStatus.TRAVEL],
        )

    @property
    def total(self) -> int:
        return self.present + self.absent + self.sick + self.travel

    def to_dict(self) -> dict:
        return {
            "present": self.present,
            "absent": self.absent,
            "sick": self.sick,
            "travel": self.travel,
            "total": self.total,
        }


@dataclass(frozen=True)
class AttendanceRecord:
    """Summary row for one class/date/service-type."""

    attendance_id: int
    class_number: int
    attendance_date: date
    service_type: ServiceType
    class_leader_name: Optional[str] = None
    total_present: int = 0
    total_absent: int = 0
    total_sick: int = 0
    total_travel: int = 0
    total_visitors: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "class_number": self.class_number,
            "attendance_date": self.attendance_date.strftime("%Y-%m-%d"),
            "service_type": self.service_type.value,
            "service_label": self.service_type.label,
            "class_leader_name": self.class_leader_name,
            "total_members_present": self.total_present,
            "total_members_absent": self.total_absent,
            "total_members_sick": self.total_sick,
            "total_members_travel": self.total_travel,
            "total_visitors": self.total_visitors,
        }


@dataclass(frozen=True)
class MemberAttendance:
    """One member's status for one attendance record."""

    attendance_id: int
    member_id: int
    class_number: int
    status: MemberStatus
    attendance_date: Optional[date] = None
