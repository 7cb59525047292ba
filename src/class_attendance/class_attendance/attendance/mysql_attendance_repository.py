from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Sequence

from ..core.enums import MemberStatus, ServiceType
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_int, db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import AttendanceRecord, MemberAttendance
from .repository import AttendanceRepository

_COLUMNS = """
    id, class_number, attendance_date, service_type, class_leader_name,
    total_members_present, total_members_absent, total_members_sick, total_members_travel, total_visitors
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["id"]),
        class_number=int(r["class_number"]),
        attendance_date=normalize_mysql_date(r["attendance_date"]),
        service_type=ServiceType(r["service_type"]),
        class_leader_name=r.get("class_leader_name"),
        total_present=as_int(r.get("total_members_present")),
        total_absent=as_int(r.get("total_members_absent")),
        total_sick=as_int(r.get("total_members_sick")),
        total_travel=as_int(r.get("total_members_travel")),
        total_visitors=as_int(r.get("total_visitors")),
    )


def _to_member_status(r: dict) -> MemberAttendance:
    return MemberAttendance(
        attendance_id=int(r["attendance_id"]),
        member_id=int(r["member_id"]),
        class_number=int(r["class_number"]),
        status=MemberStatus(str(r["status"]).strip().lower()),
        attendance_date=normalize_mysql_date(r.get("attendance_date")),
    )


def _upsert_member_rows(cur, attendance_id: int, class_number: int, statuses: Mapping[int, MemberStatus]) -> None:
    if not statuses:
        return
    cur.executemany(
        """
        INSERT INTO member_attendance(attendance_id, member_id, class_number, status)
        VALUES(%s,%s,%s,%s)
        ON DUPLICATE KEY UPDATE status=VALUES(status)
        """,
        [(attendance_id, int(member_id), class_number, MemberStatus(s).value) for member_id, s in statuses.items()],
    )


def _recompute_totals(cur, attendance_id: int) -> None:
    """Derive the summary counts from every member row of the record."""
    cur.execute(
        "SELECT status, COUNT(*) AS n FROM member_attendance WHERE attendance_id=%s GROUP BY status",
        (attendance_id,),
    )
    counts = {str(r["status"]): int(r["n"]) for r in fetchall(cur)}
    cur.execute(
        """
        UPDATE attendance
        SET total_members_present=%s, total_members_absent=%s,
            total_members_sick=%s, total_members_travel=%s
        WHERE id=%s
        """,
        (
            counts.get(MemberStatus.PRESENT.value, 0),
            counts.get(MemberStatus.ABSENT.value, 0),
            counts.get(MemberStatus.SICK.value, 0),
            counts.get(MemberStatus.TRAVEL.value, 0),
            attendance_id,
        ),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_class(self, class_number: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE class_number=%s
                ORDER BY attendance_date DESC, service_type ASC
                """,
                (int(class_number),),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_all(self) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance ORDER BY attendance_date DESC, class_number ASC")
            return [_to_record(r) for r in fetchall(cur)]

    def list_range(self, *, class_number: int, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE class_number=%s AND attendance_date BETWEEN %s AND %s
                ORDER BY attendance_date ASC, service_type ASC
                """,
                (int(class_number), start_date, end_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_class_date_service(
        self, *, class_number: int, attendance_date: date, service_type: ServiceType
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE class_number=%s AND attendance_date=%s AND service_type=%s
                """,
                (int(class_number), attendance_date, service_type.value),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

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
        visitors_update = ", total_visitors=VALUES(total_visitors)" if visitors is not None else ""
        with db_cursor(self._conn_factory) as (_, cur):
            # LAST_INSERT_ID(id) makes lastrowid point at the existing row on conflict.
            cur.execute(
                f"""
                INSERT INTO attendance(class_number, attendance_date, service_type, class_leader_name, total_visitors)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    id=LAST_INSERT_ID(id),
                    class_leader_name=VALUES(class_leader_name){visitors_update}
                """,
                (int(class_number), attendance_date, service_type.value, class_leader_name, int(visitors or 0)),
            )
            attendance_id = int(cur.lastrowid)
            _upsert_member_rows(cur, attendance_id, int(class_number), statuses)
            _recompute_totals(cur, attendance_id)
            return attendance_id

    def list_member_statuses(self, attendance_id: int) -> Sequence[MemberAttendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT ma.attendance_id, ma.member_id, ma.class_number, ma.status, a.attendance_date
                FROM member_attendance ma
                JOIN attendance a ON a.id = ma.attendance_id
                WHERE ma.attendance_id=%s
                ORDER BY ma.member_id ASC
                """,
                (int(attendance_id),),
            )
            return [_to_member_status(r) for r in fetchall(cur)]

    def replace_member_statuses(self, attendance_id: int, statuses: Mapping[int, MemberStatus]) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE id=%s FOR UPDATE", (int(attendance_id),))
            r = fetchone(cur)
            if not r:
                raise NotFoundError("Attendance record not found")
            record = _to_record(r)

            _upsert_member_rows(cur, record.attendance_id, record.class_number, statuses)
            _recompute_totals(cur, record.attendance_id)

            cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE id=%s", (record.attendance_id,))
            return _to_record(fetchone(cur))

    def update_totals(self, *, attendance_id: int, present: int, absent: int, visitors: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET total_members_present=%s, total_members_absent=%s, total_visitors=%s
                WHERE id=%s
                """,
                (int(present), int(absent), int(visitors), int(attendance_id)),
            )
            return cur.rowcount > 0

    def list_member_statuses_in_range(
        self, *, class_number: int, start_date: date, end_date: date
    ) -> Sequence[MemberAttendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT ma.attendance_id, ma.member_id, ma.class_number, ma.status, a.attendance_date
                FROM member_attendance ma
                JOIN attendance a ON a.id = ma.attendance_id
                WHERE a.class_number=%s AND a.attendance_date BETWEEN %s AND %s
                ORDER BY a.attendance_date ASC, ma.member_id ASC
                """,
                (int(class_number), start_date, end_date),
            )
            return [_to_member_status(r) for r in fetchall(cur)]

    def count_since(self, since: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM attendance WHERE attendance_date >= %s", (since,))
            return int(fetchone(cur)["n"])
