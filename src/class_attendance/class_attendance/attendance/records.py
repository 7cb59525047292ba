"""Attendance history: year/month grouping and the edit-and-save workflow."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, Iterable, Optional, Sequence, TypeVar

from ..core.constants import DEFAULT_SAVE_TIMEOUT_SECONDS
from ..core.enums import MemberStatus, ServiceType
from ..core.exceptions import SaveTimeoutError, ValidationError
from .model import AttendanceRecord, MemberAttendance
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


def group_by_year_month(records: Iterable[AttendanceRecord]) -> dict[int, dict[int, list[AttendanceRecord]]]:
    """{year: {month: [records]}}; years and months newest first, records date-descending."""
    ordered = sorted(records, key=lambda r: (r.attendance_date, r.service_type.value), reverse=True)
    grouped: dict[int, dict[int, list[AttendanceRecord]]] = {}
    for r in ordered:
        grouped.setdefault(r.attendance_date.year, {}).setdefault(r.attendance_date.month, []).append(r)
    return grouped


def summarize(records: Sequence[AttendanceRecord]) -> dict:
    return {
        "records": len(records),
        "sunday": sum(1 for r in records if r.service_type == ServiceType.SUNDAY),
        "bible_study": sum(1 for r in records if r.service_type == ServiceType.BIBLE_STUDY),
        "total_present": sum(r.total_present for r in records),
    }


def run_with_timeout(fn: Callable[[], T], timeout_seconds: float) -> T:
    """Wait at most ``timeout_seconds`` for ``fn``; the call itself is not cancelled."""
    executor = ThreadPoolExecutor(max_workers=1)
    future = executor.submit(fn)
    try:
        return future.result(timeout=timeout_seconds)
    except FutureTimeoutError:
        raise SaveTimeoutError("Save operation timed out")
    finally:
        executor.shutdown(wait=False)


class AttendanceEditSession:
    """Re-mark members of a past attendance record, then persist in one step.

    Member rows are fetched lazily per record and cached. Edits stay in memory
    until ``save``; ``cancel`` drops them without touching the backend.
    """

    def __init__(self, attendance: AttendanceRepository, *, timeout_seconds: float = DEFAULT_SAVE_TIMEOUT_SECONDS):
        self._attendance = attendance
        self._timeout_seconds = timeout_seconds
        self._cache: dict[int, list[MemberAttendance]] = {}
        self._record_id: Optional[int] = None
        self._edits: dict[int, MemberStatus] = {}
        self.saving = False

    @property
    def record_id(self) -> Optional[int]:
        return self._record_id

    @property
    def edits(self) -> dict[int, MemberStatus]:
        return dict(self._edits)

    def begin_edit(self, record_id: int) -> dict[int, MemberStatus]:
        record_id = int(record_id)
        if record_id not in self._cache:
            self._cache[record_id] = list(self._attendance.list_member_statuses(record_id))
        self._record_id = record_id
        self._edits = {m.member_id: m.status for m in self._cache[record_id]}
        return self.edits

    def status_for(self, member_id: int) -> MemberStatus:
        return self._edits.get(int(member_id), MemberStatus.ABSENT)

    def set_status(self, member_id: int, status: MemberStatus) -> None:
        if self._record_id is None:
            raise ValidationError("No attendance record is being edited")
        self._edits[int(member_id)] = MemberStatus(status)

    def cancel(self) -> None:
        self._record_id = None
        self._edits = {}

    def save(self) -> AttendanceRecord:
        if self._record_id is None:
            raise ValidationError("No attendance record is being edited")
        if not self._edits:
            raise ValidationError("No members marked. Please mark at least one member before saving.")

        record_id = self._record_id
        edits = dict(self._edits)
        self.saving = True
        try:
            record = run_with_timeout(
                lambda: self._attendance.replace_member_statuses(record_id, edits),
                self._timeout_seconds,
            )
        except SaveTimeoutError:
            logger.warning("Saving edits for attendance %s timed out after %ss", record_id, self._timeout_seconds)
            raise
        finally:
            self.saving = False

        self._cache[record_id] = [
            MemberAttendance(
                attendance_id=record_id,
                member_id=member_id,
                class_number=record.class_number,
                status=status,
                attendance_date=record.attendance_date,
            )
            for member_id, status in edits.items()
        ]
        logger.info("Attendance %s edited (%d member statuses)", record_id, len(edits))
        self.cancel()
        return record
