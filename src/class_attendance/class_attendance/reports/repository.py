from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ReportType
from .model import ClassReportStatus, ManualReport, ReportMemberNote


class ReportRepository(Protocol):
    """Persistence for report notes, quarterly confirmations and manual reports."""

    def list_notes(
        self, *, class_number: int, report_type: ReportType, period_key: str
    ) -> Sequence[ReportMemberNote]:
        raise NotImplementedError

    def upsert_note(
        self, *, class_number: int, member_id: int, report_type: ReportType, period_key: str, note: str
    ) -> None:
        raise NotImplementedError

    def delete_note(self, *, class_number: int, member_id: int, report_type: ReportType, period_key: str) -> bool:
        raise NotImplementedError

    def get_status(self, *, class_number: int, report_type: ReportType, period_key: str) -> Optional[ClassReportStatus]:
        raise NotImplementedError

    def mark_submitted(
        self, *, class_number: int, report_type: ReportType, period_key: str, submitted_at: datetime
    ) -> ClassReportStatus:
        raise NotImplementedError

    def save_manual_report(self, report: ManualReport) -> int:
        raise NotImplementedError

    def list_manual_reports(self, class_number: int) -> Sequence[ManualReport]:
        raise NotImplementedError

    def delete_manual_report(self, *, class_number: int, report_id: int) -> bool:
        raise NotImplementedError
