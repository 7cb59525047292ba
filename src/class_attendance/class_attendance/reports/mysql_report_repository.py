from __future__ import annotations

import json
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import MemberStatus, ReportStatus, ReportType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import ClassReportStatus, ManualReport, ReportMemberNote
from .repository import ReportRepository


def _to_status(r: dict) -> ClassReportStatus:
    return ClassReportStatus(
        class_number=int(r["class_number"]),
        report_type=ReportType(r["report_type"]),
        period_key=r["period_key"],
        status=ReportStatus(r["status"]),
        submitted_at=r.get("submitted_at"),
    )


def _to_manual_report(r: dict) -> ManualReport:
    data = r.get("report_data") or {}
    if isinstance(data, (bytes, bytearray)):
        data = data.decode("utf-8")
    if isinstance(data, str):
        data = json.loads(data)
    types = [t for t in (r.get("absence_types") or "").split(",") if t]
    return ManualReport(
        report_id=int(r["id"]),
        class_number=int(r["class_number"]),
        report_date=r["report_date"],
        date_range_start=normalize_mysql_date(r["date_range_start"]),
        date_range_end=normalize_mysql_date(r["date_range_end"]),
        absence_types=tuple(MemberStatus(t) for t in types),
        report_data=data,
    )


class MySQLReportRepository(ReportRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # --- notes ---

    def list_notes(
        self, *, class_number: int, report_type: ReportType, period_key: str
    ) -> Sequence[ReportMemberNote]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT member_id, note FROM report_member_notes
                WHERE class_number=%s AND report_type=%s AND period_key=%s
                """,
                (int(class_number), report_type.value, period_key),
            )
            return [
                ReportMemberNote(
                    class_number=int(class_number),
                    member_id=int(r["member_id"]),
                    report_type=report_type,
                    period_key=period_key,
                    note=r["note"] or "",
                )
                for r in fetchall(cur)
            ]

    def upsert_note(
        self, *, class_number: int, member_id: int, report_type: ReportType, period_key: str, note: str
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO report_member_notes(class_number, member_id, report_type, period_key, note)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE note=VALUES(note)
                """,
                (int(class_number), int(member_id), report_type.value, period_key, note),
            )

    def delete_note(self, *, class_number: int, member_id: int, report_type: ReportType, period_key: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                DELETE FROM report_member_notes
                WHERE class_number=%s AND member_id=%s AND report_type=%s AND period_key=%s
                """,
                (int(class_number), int(member_id), report_type.value, period_key),
            )
            return cur.rowcount > 0

    # --- quarterly confirmation ---

    def get_status(self, *, class_number: int, report_type: ReportType, period_key: str) -> Optional[ClassReportStatus]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT class_number, report_type, period_key, status, submitted_at
                FROM class_reports
                WHERE class_number=%s AND report_type=%s AND period_key=%s
                LIMIT 1
                """,
                (int(class_number), report_type.value, period_key),
            )
            r = fetchone(cur)
            return _to_status(r) if r else None

    def mark_submitted(
        self, *, class_number: int, report_type: ReportType, period_key: str, submitted_at: datetime
    ) -> ClassReportStatus:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO class_reports(class_number, report_type, period_key, status, submitted_at)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE status=VALUES(status), submitted_at=VALUES(submitted_at)
                """,
                (int(class_number), report_type.value, period_key, ReportStatus.SUBMITTED.value, submitted_at),
            )
        return ClassReportStatus(
            class_number=int(class_number),
            report_type=report_type,
            period_key=period_key,
            status=ReportStatus.SUBMITTED,
            submitted_at=submitted_at,
        )

    # --- manual reports ---

    def save_manual_report(self, report: ManualReport) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO manual_reports(class_number, report_date, date_range_start, date_range_end,
                                           absence_types, report_data)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(report.class_number),
                    report.report_date,
                    report.date_range_start,
                    report.date_range_end,
                    ",".join(t.value for t in report.absence_types),
                    json.dumps(report.report_data),
                ),
            )
            return int(cur.lastrowid)

    def list_manual_reports(self, class_number: int) -> Sequence[ManualReport]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, class_number, report_date, date_range_start, date_range_end, absence_types, report_data
                FROM manual_reports
                WHERE class_number=%s
                ORDER BY report_date DESC, id DESC
                """,
                (int(class_number),),
            )
            return [_to_manual_report(r) for r in fetchall(cur)]

    def delete_manual_report(self, *, class_number: int, report_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM manual_reports WHERE id=%s AND class_number=%s",
                (int(report_id), int(class_number)),
            )
            return cur.rowcount > 0
