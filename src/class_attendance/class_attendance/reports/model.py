from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import month_range, quarter_range
from ..core.enums import MemberStatus, ReportStatus, ReportType
from ..core.exceptions import ValidationError

_MONTH_KEY = re.compile(r"^(\d{4})-(\d{2})$")
_QUARTER_KEY = re.compile(r"^(\d{4})-Q([1-4])$")


@dataclass(frozen=True)
class Period:
    """A report period: 'YYYY-MM' (monthly) or 'YYYY-Qn' (quarterly)."""

    report_type: ReportType
    key: str
    start_date: date
    end_date: date

    @classmethod
    def parse(cls, key: str) -> "Period":
        key = (key or "").strip().upper()

        m = _MONTH_KEY.match(key)
        if m:
            year, month = int(m.group(1)), int(m.group(2))
            if not 1 <= month <= 12:
                raise ValidationError(f"Invalid month in period {key!r}")
            start, end = month_range(year, month)
            return cls(ReportType.MONTHLY, key, start, end)

        q = _QUARTER_KEY.match(key)
        if q:
            start, end = quarter_range(int(q.group(1)), int(q.group(2)))
            return cls(ReportType.QUARTERLY, key, start, end)

        raise ValidationError(f"Invalid period {key!r} (expected YYYY-MM or YYYY-Qn)")

    @property
    def is_quarterly(self) -> bool:
        return self.report_type == ReportType.QUARTERLY

    def to_dict(self) -> dict:
        return {
            "report_type": self.report_type.value,
            "period_key": self.key,
            "start": self.start_date.isoformat(),
            "end": self.end_date.isoformat(),
        }


@dataclass(frozen=True)
class ReportMemberNote:
    class_number: int
    member_id: int
    report_type: ReportType
    period_key: str
    note: str


@dataclass(frozen=True)
class ClassReportStatus:
    """Confirmation of a quarterly class report."""

    class_number: int
    report_type: ReportType
    period_key: str
    status: ReportStatus
    submitted_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "class_number": self.class_number,
            "report_type": self.report_type.value,
            "period_key": self.period_key,
            "status": self.status.value,
            "submitted_at": self.submitted_at.isoformat() if self.submitted_at else None,
        }


@dataclass(frozen=True)
class ManualReport:
    """Archived ad-hoc absence report.

    ``report_data`` maps member id (as str) to
    ``{"name", "absent_count", "sick_count", "travel_count", "total_absences"}``.
    """

    report_id: Optional[int]
    class_number: int
    report_date: datetime
    date_range_start: date
    date_range_end: date
    absence_types: tuple[MemberStatus, ...]
    report_data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "id": self.report_id,
            "class_number": self.class_number,
            "report_date": self.report_date.isoformat(),
            "date_range_start": self.date_range_start.isoformat(),
            "date_range_end": self.date_range_end.isoformat(),
            "absence_types": [t.value for t in self.absence_types],
            "report_data": self.report_data,
        }
